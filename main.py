import logging
import os

DEFAULT_LOG_LEVEL = 'INFO'

log_level = os.environ.get('LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()

if log_level not in logging.getLevelNamesMapping():
    log_level = DEFAULT_LOG_LEVEL

logging.basicConfig(
    format='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
    level=log_level,
    datefmt='%Y-%m-%d %H:%M:%S',
)

from picotimer.config import load_config
from picotimer.controller import AppController


def main():
    AppController(load_config()).start()


if __name__ == '__main__':
    main()
