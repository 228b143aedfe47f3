"""
Module: output.archive

Purpose:
    Package a batch of requests into the distributable ZIP archive.

    Every request gets a print PDF, a passcode-protected computer display
    PDF (inside a nested, unencrypted ZIP) and a plain-text transcript.
    Fewest-moves requests additionally get cutout strips and localized
    solution sheets. The archive closes with the passcode manifest, the
    interchange JSON/JSONP/viewer and the all-scrambles bundle.

Key Classes:
    - NameRegistry: Archive-wide duplicate name disambiguation
    - ArchiveManifest: Ordered entries and passcodes, serialized at the end

Key Functions:
    - random_passcode(): Cryptographically random passcode
    - to_file_safe_string(): Title -> file name component
    - build_manifest(): Requests -> ArchiveManifest
    - requests_to_zip(): Requests -> ZIP bytes

Dependencies:
    - unidecode: Transliteration of titles
    - pyzipper: AES encrypted outer archive
    - zipfile (std): Unencrypted archives

Used By:
    - controller: build_archive()
"""

from __future__ import annotations

import io
import logging
import re
import secrets
import zipfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Sequence

import pyzipper
from unidecode import unidecode

from scramble_sheets.core.models.request import ScrambleRequest
from scramble_sheets.errors import BuildError
from scramble_sheets.i18n import DEFAULT_LOCALE, supported_locales
from scramble_sheets.layout.config import SheetConfig

from .assembler import (
    build_cutout_pdf,
    build_generic_solution_pdf,
    build_request_pdf,
    requests_to_pdf,
)
from .interchange import build_interchange, to_json, to_jsonp, viewer_html

logger = logging.getLogger(__name__)

# No 0/O or 1/l/I
PASSCODE_ALPHABET = "23456789abcdefghijkmnpqrstuvwxyz"
PASSCODE_LENGTH = 8

DEFAULT_GLOBAL_NAME = "Scrambles"
FMC_DIR = "Printing/Fewest Moves - Additional Files"
GENERIC_SOLUTION_SHEET = f"{FMC_DIR}/3x3x3 Fewest Moves Solution Sheet.pdf"

PASSCODE_GUIDANCE = (
    "Make sure that only Delegates have access to this file.",
    "Give passcodes to scramblers when the corresponding",
    "groups begin (but not earlier). If you have to put",
    "someone else in charge of the passcodes temporarily,",
    "only give them the minimum amount of passcodes needed.",
)

_UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')


def random_passcode(length: int = PASSCODE_LENGTH) -> str:
    return "".join(secrets.choice(PASSCODE_ALPHABET) for _ in range(length))


def to_file_safe_string(text: str) -> str:
    """
    Transliterate to ASCII and drop characters no filesystem accepts.

    Example:
        >>> to_file_safe_string('Ölympia: Round 1/2')
        'Olympia Round 12'
    """
    return _UNSAFE_CHARS.sub("", unidecode(text)).strip()


class NameRegistry:
    """
    Hands out names that are unique for one archive run.

    A taken name gets the first free ``" (n)"`` suffix, n counting from 1.
    """

    def __init__(self) -> None:
        self._seen: set[str] = set()

    def claim(self, name: str) -> str:
        candidate = name
        salt = 0
        while candidate in self._seen:
            salt += 1
            candidate = f"{name} ({salt})"
        self._seen.add(candidate)
        return candidate

    def __contains__(self, name: str) -> bool:
        return name in self._seen


@dataclass
class ArchiveManifest:
    """
    Archive contents collected before anything is written.

    Attributes:
        entries: Archive path -> bytes, in write order
        display_entries: Nested computer display archive path -> bytes
        passcodes: Disambiguated title -> passcode, in request order
    """

    entries: Dict[str, bytes] = field(default_factory=dict)
    display_entries: Dict[str, bytes] = field(default_factory=dict)
    passcodes: Dict[str, str] = field(default_factory=dict)

    def add(self, path: str, data: bytes) -> None:
        if path in self.entries:
            raise ValueError(f"Duplicate archive entry: {path}")
        self.entries[path] = data

    def add_display(self, path: str, data: bytes) -> None:
        if path in self.display_entries:
            raise ValueError(f"Duplicate computer display entry: {path}")
        self.display_entries[path] = data


@contextmanager
def _stage(stage: str, title: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except (RuntimeError, OSError, ValueError) as exc:
        raise BuildError(str(exc), title=title, stage=stage) from exc


def transcript(request: ScrambleRequest) -> bytes:
    """All scrambles, one per CRLF line, inner newlines flattened to spaces."""
    lines = [scramble.replace("\n", " ") for scramble in request.all_scrambles]
    return "\r\n".join(lines).encode("utf-8")


def passcode_manifest(passcodes: Dict[str, str], global_title: Optional[str]) -> bytes:
    lines = ["SECRET SCRAMBLE SET PASSCODES"]
    if global_title is not None:
        lines.append(global_title)
    lines.append("")
    lines.extend(PASSCODE_GUIDANCE)
    lines.append("")
    lines.extend(f"{title:>40}: {passcode}" for title, passcode in passcodes.items())
    return "".join(line + "\r\n" for line in lines).encode("utf-8")


def build_manifest(
    requests: Sequence[ScrambleRequest],
    global_title: Optional[str],
    generation_date: datetime,
    *,
    generation_url: Optional[str] = None,
    schedule: Optional[Any] = None,
    include_all_scrambles: bool = True,
    config: Optional[SheetConfig] = None,
) -> ArchiveManifest:
    """
    Render every document of the batch into an ArchiveManifest.

    Raises:
        BuildError: Any document failed to build, with title and stage
    """
    config = config or SheetConfig()
    safe_global = to_file_safe_string(global_title or "") or DEFAULT_GLOBAL_NAME
    display_dir = f"{safe_global} - Computer Display PDFs"
    names = NameRegistry()
    manifest = ArchiveManifest()

    # 1. Cutout strips and the shared blank solution sheet
    fmc_requests = [r for r in requests if r.fmc]
    for request in fmc_requests:
        name = names.claim(f"{to_file_safe_string(request.title)} - Scramble Cutout Sheet")
        with _stage("fmc-cutout", request.title):
            manifest.add(f"{FMC_DIR}/{name}.pdf", build_cutout_pdf(request, global_title, generation_date, config))
    if fmc_requests:
        with _stage("fmc-generic"):
            manifest.add(GENERIC_SOLUTION_SHEET, build_generic_solution_pdf(global_title, generation_date, DEFAULT_LOCALE, config))

    # 2. Per-request documents
    locales = supported_locales()
    for request in requests:
        safe_title = names.claim(to_file_safe_string(request.title))

        with _stage("print-pdf", request.title):
            manifest.add(
                f"Printing/Scramble Sets/{safe_title}.pdf",
                build_request_pdf(request, global_title, generation_date, config=config),
            )

        passcode = random_passcode()
        manifest.passcodes[safe_title] = passcode
        with _stage("computer-display", request.title):
            manifest.add_display(
                f"{display_dir}/{safe_title}.pdf",
                build_request_pdf(request, global_title, generation_date, password=passcode, config=config),
            )

        manifest.add(f"Interchange/txt/{safe_title}.txt", transcript(request))

        if not request.fmc:
            continue
        for locale in locales:
            prefix = f"{FMC_DIR}/Translations/{locale}_{safe_title}"
            with _stage(f"fmc-{locale}", request.title):
                manifest.add(
                    f"{prefix}.pdf",
                    build_request_pdf(request, global_title, generation_date, locale=locale, config=config),
                )
                manifest.add(
                    f"{prefix} Solution Sheet.pdf",
                    build_generic_solution_pdf(global_title, generation_date, locale, config),
                )
        logger.debug(f"Localized fewest-moves sheets for {request.title!r}: {', '.join(locales)}")

    # 3. Computer display archive and its passcodes
    with _stage("computer-display-zip"):
        manifest.add(f"{display_dir}.zip", _zip_bytes(manifest.display_entries))
    manifest.add(
        f"{safe_global} - Computer Display PDF Passcodes - SECRET.txt",
        passcode_manifest(manifest.passcodes, global_title),
    )

    # 4. Interchange
    json_text = to_json(build_interchange(requests, global_title, generation_date, generation_url, schedule))
    jsonp_name = f"{safe_global}.jsonp"
    manifest.add(f"Interchange/{safe_global}.json", json_text.encode("utf-8"))
    manifest.add(f"Interchange/{jsonp_name}", to_jsonp(json_text).encode("utf-8"))
    with _stage("viewer"):
        manifest.add(f"Interchange/{safe_global}.html", viewer_html(jsonp_name).encode("utf-8"))

    # 5. Everything in one document, never encrypted
    if include_all_scrambles:
        with _stage("all-scrambles"):
            manifest.add(
                f"Printing/{safe_global} - All Scrambles.pdf",
                requests_to_pdf(requests, global_title, generation_date, config=config),
            )

    logger.info(f"Archive manifest ready: {len(manifest.entries)} entries, {len(manifest.passcodes)} passcodes")
    return manifest


def _zip_bytes(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for path, data in entries.items():
            zf.writestr(path, data)
    return buffer.getvalue()


def _encrypted_zip_bytes(entries: Dict[str, bytes], password: str) -> bytes:
    buffer = io.BytesIO()
    with pyzipper.AESZipFile(
        buffer, "w", compression=pyzipper.ZIP_DEFLATED, encryption=pyzipper.WZ_AES
    ) as zf:
        zf.setpassword(password.encode("utf-8"))
        for path, data in entries.items():
            zf.writestr(path, data)
    return buffer.getvalue()


def write_manifest(manifest: ArchiveManifest, password: Optional[str] = None) -> bytes:
    """Serialize a manifest; AES-encrypt every entry when ``password`` is set."""
    with _stage("zip"):
        if password:
            return _encrypted_zip_bytes(manifest.entries, password)
        return _zip_bytes(manifest.entries)


def requests_to_zip(
    requests: Sequence[ScrambleRequest],
    global_title: Optional[str],
    generation_date: datetime,
    *,
    password: Optional[str] = None,
    generation_url: Optional[str] = None,
    schedule: Optional[Any] = None,
    include_all_scrambles: bool = True,
    config: Optional[SheetConfig] = None,
) -> tuple[bytes, Dict[str, str]]:
    """
    Build the complete archive.

    Args:
        requests: Parsed requests, already in pagination order
        global_title: Competition name (also names the archive files)
        generation_date: Stamped on documents and in the interchange JSON
        password: Encrypts the outer archive when set
        generation_url / schedule: Copied into the interchange JSON

    Returns:
        (ZIP bytes, passcodes by disambiguated title)
    """
    manifest = build_manifest(
        requests,
        global_title,
        generation_date,
        generation_url=generation_url,
        schedule=schedule,
        include_all_scrambles=include_all_scrambles,
        config=config,
    )
    data = write_manifest(manifest, password)
    logger.info(f"Archive built: {len(data)} bytes{' (encrypted)' if password else ''}")
    return data, dict(manifest.passcodes)
