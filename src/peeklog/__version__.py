# -*- coding: utf-8 -*-

__title__ = "peeklog"
__description__ = "Leveled logging library with size and time based file rotation"
__url__ = "https://github.com/kaydxh/peek"
__version__ = "0.1.0"
__author__ = "kaydxh"
__author_email__ = "kaydxh@gmail.com"
__license__ = "MIT"
