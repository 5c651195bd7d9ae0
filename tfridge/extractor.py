"""
Line-oriented extraction of module and provider declarations from Terraform files.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .models import MODULE, PROVIDER, DependencyDeclaration


logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r'\bmodule\s+"[^"]+"\s*\{')
_PROVIDER_RE = re.compile(r'\bprovider\s*["\']([^"\']+)["\']')
_SOURCE_RE = re.compile(r'\bsource\s*=\s*["\']([^"\']+)["\']')
_VERSION_RE = re.compile(r'\bversion\s*=\s*["\']([^"\']+)["\']')

# Quoted string literal (either quote style), or the start of a line comment.
_TOKEN_RE = re.compile(r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'|#|//')
_SEGMENT_RE = re.compile(r'"(?:[^"\\]|\\.)*"|\'(?:[^\'\\]|\\.)*\'|[{}]|[^"\'{}]+|["\']')


def _strip_comment(line: str) -> str:
    """Drop a trailing ``#`` or ``//`` comment that is not inside a string."""
    for token in _TOKEN_RE.finditer(line):
        if token.group(0) in ("#", "//"):
            return line[: token.start()]
    return line


def _split_depth(code: str, depth: int) -> Tuple[str, int]:
    """Return the text of ``code`` sitting at depth 1, and the depth after it.

    Braces inside string literals are not counted.
    """
    top = []
    for segment in _SEGMENT_RE.findall(code):
        if segment == "{":
            depth += 1
        elif segment == "}":
            depth -= 1
        elif depth == 1:
            top.append(segment)
    return "".join(top), depth


@dataclass
class _ModuleBlock:
    line: int
    depth: int = 1
    source: str = ""
    version: str = ""

    def advance(self, code: str) -> bool:
        """Read top-level assignments from a line; True once the block closes."""
        top, self.depth = _split_depth(code, self.depth)
        self.capture(top)
        return self.depth <= 0

    def capture(self, code: str) -> None:
        source_match = _SOURCE_RE.search(code)
        if source_match:
            self.source = source_match.group(1)
        version_match = _VERSION_RE.search(code)
        if version_match:
            self.version = version_match.group(1)

    def close(self, file_path: Optional[str]) -> Optional[DependencyDeclaration]:
        if not self.source:
            logger.debug("Skipping module block without source at line %d", self.line)
            return None
        return DependencyDeclaration(
            kind=MODULE,
            source=self.source,
            version=self.version,
            file_path=file_path,
            line=self.line,
        )


def extract_declarations(
    text: str, file_path: Optional[str] = None
) -> List[DependencyDeclaration]:
    """Extract module and provider declarations from configuration text.

    A ``module "<name>" {`` line opens a block that runs until its braces
    balance. Only assignments at the top level of the block are read, so
    nested blocks neither end it early nor override its source/version.
    A ``provider "<name>"`` line yields the provider with a version only
    if one is assigned on that same line.
    """
    declarations: List[DependencyDeclaration] = []
    block: Optional[_ModuleBlock] = None

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        code = _strip_comment(raw_line)

        if block is not None:
            if block.advance(code):
                declaration = block.close(file_path)
                if declaration is not None:
                    declarations.append(declaration)
                block = None
            continue

        module_match = _MODULE_RE.search(code)
        if module_match:
            rest = code[module_match.end():]
            block = _ModuleBlock(line=lineno)
            if block.advance(rest):
                declaration = block.close(file_path)
                if declaration is not None:
                    declarations.append(declaration)
                block = None
            continue

        provider_match = _PROVIDER_RE.search(code)
        if provider_match:
            version_match = _VERSION_RE.search(code)
            declarations.append(
                DependencyDeclaration(
                    kind=PROVIDER,
                    source=provider_match.group(1),
                    version=version_match.group(1) if version_match else "",
                    file_path=file_path,
                    line=lineno,
                )
            )

    if block is not None:
        logger.debug("Module block opened at line %d is never closed", block.line)
        declaration = block.close(file_path)
        if declaration is not None:
            declarations.append(declaration)

    return declarations


def extract_file(path: Union[str, Path]) -> List[DependencyDeclaration]:
    """Read a configuration file and extract its declarations.

    Read errors propagate to the caller.
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8", errors="replace")
    declarations = extract_declarations(content, file_path=str(path))
    logger.debug("Found %d declarations in %s", len(declarations), path)
    return declarations
