"""Точка входа в приложение предпросмотра."""
import logging
import sys
from pathlib import Path

from imagemanip.app import ImageManipulatorApp


def main() -> None:
    """Создаёт и запускает главное окно; необязательный аргумент задаёт путь к изображению."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    app = ImageManipulatorApp()
    if len(sys.argv) > 1:
        app.after(100, app.controller.open, Path(sys.argv[1]))
    app.mainloop()


if __name__ == "__main__":
    main()
