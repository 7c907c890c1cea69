import json
import logging
import random
import sys
from typing import Any

# Message colors. Without a terminal UI they only pick the log level.
red = 1
green = 2
blue = 3
gray = 4

SETTINGS_FILE = "session_settings.json"

default_settings = {
    "top": 1,           # number of best layouts to keep and print
    "swaps": 3,         # max swaps per annealing iteration; refine depth
    "generations": 0,   # annealing generations for run, 0 runs until ^C
    "seed": None,       # random seed, None for a fresh one each run
    "processes": 1,     # worker processes for refine
    "high_keys": 5,     # substrings shown per penalty in reports
    "plot": None,       # image file for the annealing chart
    "debug": False,
}

# Smallest allowed value of each integer setting
minimums = {
    "top": 1,
    "swaps": 1,
    "generations": 0,
    "processes": 1,
    "high_keys": 0,
}

logger = logging.getLogger("keysmith")

def setup_logging(debug: bool = False):
    """Console logging with bare messages, since log output is the user
    interface.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)
    set_debug(debug)

def set_debug(debug: bool):
    logging.getLogger().setLevel(logging.DEBUG if debug else logging.INFO)

def is_valid_setting(name: str, value: Any) -> bool:
    if name not in default_settings:
        return False
    if name == "debug":
        return isinstance(value, bool)
    if name == "plot":
        return value is None or isinstance(value, str)
    if name == "seed":
        return value is None or (
            isinstance(value, int) and not isinstance(value, bool))
    return (isinstance(value, int) and not isinstance(value, bool)
        and value >= minimums[name])

class Session:
    """
    Contains keysmith settings and output--everything needed for commands
    to be run.
    """

    def __init__(self, settings_file: str = SETTINGS_FILE) -> None:
        self.startup_messages = []
        self.settings = dict(default_settings)

        try:
            with open(settings_file) as file:
                settings = json.load(file)
            some_default = False
            for name in default_settings:
                try:
                    value = settings[name]
                except KeyError:
                    some_default = True
                    continue
                if is_valid_setting(name, value):
                    self.settings[name] = value
                else:
                    some_default = True
            self.startup_messages.append(("Loaded user settings", gray))
            if some_default:
                self.startup_messages.append((
                    "Set some missing/bad settings to default", blue))
        except (FileNotFoundError, TypeError, json.decoder.JSONDecodeError):
            self.startup_messages.append(
                ("Using default user settings", gray))

        for item in self.startup_messages:
            self.say(*item)

    def set_option(self, name: str, raw: str) -> bool:
        """Overrides a setting for this run from a command line string.
        Bad values are reported and leave the setting unchanged.
        """
        current = self.settings[name]
        if name == "plot":
            value = raw
        else:
            try:
                value = int(raw)
            except ValueError:
                value = None
        if value is None or not is_valid_setting(name, value):
            self.say(f"Invalid option value {raw}. "
                f"Using default value {current}.", red)
            return False
        self.settings[name] = value
        return True

    def make_rng(self) -> random.Random:
        return random.Random(self.settings["seed"])

    def say(self, msg: str, color: int = 0):
        if color == red:
            logger.error(msg)
        elif color == gray:
            logger.debug(msg)
        else:
            logger.info(msg)
