import logging
import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s %(levelname)s %(module)s %(label)s: %(message)s'

# Library loggers that drown out request logs at INFO
NOISY_LIBRARY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def _level(name):
    return getattr(logging, name, logging.INFO)


class SafeLabelFormatter(logging.Formatter):
    def format(self, record):
        if not hasattr(record, 'label'):
            record.label = '-'
        return super().format(record)


class LabelLoggerAdapter(logging.LoggerAdapter):
    def __init__(self, logger, label):
        super().__init__(logger, {'label': label})

    def process(self, msg, kwargs):
        return f"{self.extra['label']}: {msg}", kwargs


def new_logger(label, module_name=None):
    if module_name is None:
        import inspect
        frame = inspect.currentframe()
        try:
            module_name = frame.f_back.f_globals['__name__']
        finally:
            del frame
    logger = logging.getLogger(module_name)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(SafeLabelFormatter(fmt=LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(handler)
    logger.setLevel(_level(LOG_LEVEL))
    return LabelLoggerAdapter(logger, label)


def quiet_library_loggers(level=logging.WARNING):
    """Raise third-party loggers to ``level`` unless LOG_LEVEL is DEBUG."""
    if _level(LOG_LEVEL) <= logging.DEBUG:
        return
    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(level)
