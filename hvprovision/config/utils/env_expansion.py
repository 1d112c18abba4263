"""Environment variable expansion for configuration values."""
import os
import re
from typing import Any, Mapping, Optional

# ${VAR}, ${VAR:default} or $VAR
_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def expand_env_vars(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """
    Expand environment variable references in strings, recursively.

    Unset variables without a default are left as written.

    Examples:
        "$HOME/hvprov"          -> "/home/ops/hvprov"
        "${WINRM_PASSWORD}"     -> value of WINRM_PASSWORD
        "${DHCP_SERVER:dhcp01}" -> "dhcp01" when DHCP_SERVER is unset
    """
    env = os.environ if environ is None else environ

    if isinstance(value, dict):
        return {k: expand_env_vars(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(v, env) for v in value]
    if not isinstance(value, str) or "$" not in value:
        return value

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1) or match.group(3)
        default = match.group(2)
        if name in env:
            return env[name]
        if default is not None:
            return default
        return match.group(0)

    return _ENV_PATTERN.sub(replace, value)
