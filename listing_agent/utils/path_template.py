"""Path templates for root and put directories."""

import re
from typing import Mapping, Set

from listing_agent.core.exceptions import ConfigurationError

_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_.]*)\}")


def template_variables(template: str) -> Set[str]:
    return set(_PLACEHOLDER.findall(template))


def render_path_template(template: str, variables: Mapping[str, str]) -> str:
    """
    Replace every ${name} placeholder in template with variables[name].

    A template without placeholders is returned unchanged. A placeholder with
    no matching variable raises ConfigurationError.
    """
    missing = template_variables(template) - set(variables)
    if missing:
        raise ConfigurationError(
            f"Unknown variable(s) {', '.join(sorted(missing))} in path template '{template}'"
        )

    return _PLACEHOLDER.sub(lambda match: str(variables[match.group(1)]), template)
