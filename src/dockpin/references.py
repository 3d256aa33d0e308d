"""Dockerfile base-image reference scanning and digest rewriting.

Only the ``FROM`` instruction is recognised. Lines are matched one at a time,
so everything outside the digest portion of a matching line is passed through
untouched.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

FROM_PATTERN = re.compile(r"^(FROM\s+(?:--\S+\s+)*([^@\s]+))(@\S+)?(.*)$")
SCRATCH_IMAGE = "scratch"


@dataclass(frozen=True, slots=True)
class BaseImageReference:
    name: str
    digest: str | None
    line_index: int
    prefix: str
    suffix: str

    @property
    def pinned(self) -> str:
        """The reference as written, ``name`` or ``name@digest``."""
        if self.digest is None:
            return self.name
        return f"{self.name}@{self.digest}"

    def with_digest(self, digest: str) -> str:
        """Rebuild the original line with *digest* replacing any recorded one."""
        return f"{self.prefix}@{digest}{self.suffix}"


def parse_reference_line(line: str, line_index: int = 0) -> BaseImageReference | None:
    match = FROM_PATTERN.match(line)
    if match is None:
        return None
    prefix, name, digest, suffix = match.groups()
    return BaseImageReference(
        name=name,
        digest=digest[1:] if digest else None,
        line_index=line_index,
        prefix=prefix,
        suffix=suffix,
    )


def scan_references(text: str) -> list[BaseImageReference]:
    """Return every resolvable base-image reference in file order."""
    references: list[BaseImageReference] = []
    for index, line in enumerate(text.split("\n")):
        reference = parse_reference_line(line, index)
        if reference is None or reference.name == SCRATCH_IMAGE:
            continue
        references.append(reference)
    return references


def find_last_reference(text: str) -> BaseImageReference | None:
    references = scan_references(text)
    return references[-1] if references else None


def distinct_names(references: list[BaseImageReference]) -> list[str]:
    return list(dict.fromkeys(reference.name for reference in references))


def rewrite_references(text: str, digests: Mapping[str, str]) -> str:
    lines = text.split("\n")
    for index, line in enumerate(lines):
        reference = parse_reference_line(line, index)
        if reference is None or reference.name == SCRATCH_IMAGE:
            continue
        digest = digests.get(reference.name)
        if digest is not None:
            lines[index] = reference.with_digest(digest)
    return "\n".join(lines)


def is_pinned_to(reference: BaseImageReference, digest: str) -> bool:
    return reference.digest is not None and reference.digest == digest
