import json
import os

from rule_engine import RuleEngine
from semi_rule import SemiRule


RULES = {
    "semi": SemiRule,
}

DEFAULT_RULES_CONFIG = {"semi": "warn"}

_SEVERITIES = {
    "off": None,
    0: None,
    "warn": "warning",
    "warning": "warning",
    1: "warning",
    "error": "error",
    2: "error",
}


class ConfigError(ValueError):
    pass


def parse_severity(value):
    if isinstance(value, str):
        value = value.strip().lower()
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value not in _SEVERITIES:
        raise ConfigError(
            f"Unknown rule severity: {value!r}. Valid severities: off, warn, error (or 0, 1, 2)."
        )
    return _SEVERITIES[value]


def parse_rule_setting(setting):
    """
    Splits an ESLint-style rule setting into (severity, options).

    "error"             -> ("error", [])
    ["warn", "always"]  -> ("warning", ["always"])
    """
    if isinstance(setting, (list, tuple)):
        if not setting:
            raise ConfigError("Rule setting list must start with a severity.")
        return parse_severity(setting[0]), list(setting[1:])
    return parse_severity(setting), []


def load_config(path):
    if not os.path.isfile(path):
        raise ConfigError(f"Config file does not exist: {path}")

    try:
        with open(path, encoding="utf-8") as fh:
            config = json.load(fh)
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Could not read config file '{os.path.basename(path)}': {exc}") from exc

    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a JSON object.")

    rules = config.get("rules", {})
    if not isinstance(rules, dict):
        raise ConfigError("'rules' must be a JSON object mapping rule names to settings.")

    return {name: setting for name, setting in rules.items() if name in RULES}


def build_engine(rules_config=None):
    settings = dict(DEFAULT_RULES_CONFIG)
    if rules_config:
        settings.update(rules_config)

    rules = []
    for name, setting in settings.items():
        rule_cls = RULES.get(name)
        if rule_cls is None:
            raise ConfigError(f"Unknown rule: {name}. Valid rules: {', '.join(sorted(RULES))}.")

        severity, options = parse_rule_setting(setting)
        if severity is None:
            continue
        rules.append(rule_cls.from_configuration(options, severity))

    return RuleEngine(rules)
