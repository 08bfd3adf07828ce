# flyby/common/logging.py
#!/usr/bin/env python3
# Common logging setup

import logging


def setup_logging(name, log_file=None, level=logging.INFO):
    """
    Configure logging for a module

    Args:
        name (str): Logger name
        log_file (str): Optional log file path, console only when empty
        level (int or str): Logging level, e.g. logging.INFO or "DEBUG"

    Returns:
        logging.Logger: Configured logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    return logging.getLogger(name)
