"""Точка входа в приложение."""
import logging

from gridcutter.app import GridCutterApp
from gridcutter.config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Создаёт и запускает главное окно приложения."""
    setup_logging()
    logger.info("Grid Cutter запущен")
    app = GridCutterApp()
    app.mainloop()


if __name__ == "__main__":
    main()
