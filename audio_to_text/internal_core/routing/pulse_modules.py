from __future__ import annotations

"""
Typed view over `pactl list short modules` output.

Each line is tab separated: index, module name, argument string and (on
newer servers) a usage counter. Arguments are `key=value` tokens that may be
shell-quoted.
"""

import shlex
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

NULL_SINK_MODULE = "module-null-sink"
REMAP_SOURCE_MODULE = "module-remap-source"


def parse_module_arguments(argument: str) -> Dict[str, str]:
    try:
        tokens = shlex.split(argument or "")
    except ValueError:
        tokens = (argument or "").split()
    out: Dict[str, str] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and key:
            out[key] = value
    return out


@dataclass(frozen=True)
class PulseModule:
    index: int
    name: str
    argument: str = ""
    arguments: Dict[str, str] = field(default_factory=dict, compare=False)

    def matches(self, name: str, **expected_args: str) -> bool:
        if self.name != name:
            return False
        return all(self.arguments.get(k) == v for k, v in expected_args.items())


def parse_short_modules(text: str) -> List[PulseModule]:
    modules: List[PulseModule] = []
    for line in (text or "").splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        try:
            index = int(parts[0].strip())
        except ValueError:
            continue
        name = parts[1].strip() if len(parts) > 1 else ""
        argument = parts[2].strip() if len(parts) > 2 else ""
        modules.append(
            PulseModule(
                index=index,
                name=name,
                argument=argument,
                arguments=parse_module_arguments(argument),
            )
        )
    return modules


def find_module(
    modules: Sequence[PulseModule], name: str, **expected_args: str
) -> Optional[PulseModule]:
    for module in modules:
        if module.matches(name, **expected_args):
            return module
    return None


def find_module_by_index(
    modules: Sequence[PulseModule], index: int, name: str, **expected_args: str
) -> Optional[PulseModule]:
    for module in modules:
        if module.index == index and module.matches(name, **expected_args):
            return module
    return None
