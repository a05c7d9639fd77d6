from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO, Union

from .errors import ConflictError, InstallerError, NotFoundError, TransformError
from .lib.fsops import (
    Contents,
    copy_tree,
    empty_tree,
    make_dir_chain,
    write_file,
    write_file_if_absent,
    write_file_if_exists,
)
from .lib.paths import as_dir, normalize
from .manifest import VendorManifest, load_manifest, resolve
from .oplog import OperationLog
from .state import RunState

logger = logging.getLogger(__name__)


Transform = Callable[[str], Union[str, bytes]]
Validator = Callable[[str], bool]
Reader = Callable[[str], str]

# Errors an operation records through the log instead of raising.
RECOVERABLE = (InstallerError, OSError)


@dataclass(frozen=True)
class OpResult:
    ok: bool
    message: str = "succeeded"
    skipped: bool = False
    error: Optional[BaseException] = None


def _apply_transform(transform: Transform, contents: bytes) -> Contents:
    try:
        result = transform(contents.decode("utf-8"))
    except Exception as e:
        raise TransformError(str(e)) from e

    if not isinstance(result, (str, bytes)):
        raise TransformError("transform must return str or bytes")
    return result


class Installer:
    """Provisions project files from vendor apps listed in a composer manifest.

    Each public operation narrates itself through the OperationLog and returns
    an OpResult. A failure is logged as ``failed, cause <message> !``; with
    critical stop enabled (default) it then raises CriticalStop, which the
    top-level caller is expected to catch.
    """

    def __init__(
        self,
        echo: bool = True,
        *,
        state: Optional[RunState] = None,
        stream: Optional[TextIO] = None,
        reader: Reader = input,
    ) -> None:
        self.state = state if state is not None else RunState()
        if not echo:
            self.state.echo_enabled = False

        self.oplog = OperationLog(self.state, stream=stream)
        self._reader = reader
        self._manifest: Optional[VendorManifest] = None

    def enable_critical_stop(self) -> None:
        self.state.critical_stop_enabled = True

    def disable_critical_stop(self) -> None:
        self.state.critical_stop_enabled = False

    def is_critical_stop_enabled(self) -> bool:
        return self.state.critical_stop_enabled

    def get_logger(self) -> OperationLog:
        return self.oplog

    def get_log(self) -> str:
        return self.oplog.get_log()

    @property
    def manifest(self) -> Optional[VendorManifest]:
        return self._manifest

    def _fail(self, operation: str, error: BaseException) -> OpResult:
        # Raises CriticalStop when the policy says so.
        self.oplog.fail_with(error, operation=operation)
        return OpResult(ok=False, message=str(error), error=error)

    def _done(self) -> OpResult:
        self.oplog.succeed()
        return OpResult(ok=True)

    def _skip(self, text: str, message: str) -> OpResult:
        self.oplog.line(text)
        return OpResult(ok=True, message=message, skipped=True)

    def set_composer(self, composer_path: str) -> OpResult:
        self.oplog.begin(f" => will use composer: {composer_path} ... ")
        try:
            self._manifest = load_manifest(composer_path)
        except RECOVERABLE as e:
            return self._fail("set_composer", e)
        return self._done()

    def get_vendor_app_uri(self, vendor_app: str) -> str:
        return resolve(self._manifest, vendor_app)

    def ask_for(
        self,
        key: str,
        prompt: str,
        validator: Optional[Validator] = None,
        on_failure: Optional[str] = None,
    ) -> str:
        """Ask until validator accepts the answer; store it under key."""

        while True:
            self.oplog.line("")
            answer = str(self._reader(prompt))
            if validator is None or validator(answer):
                break
            if on_failure:
                self.oplog.begin(on_failure)

        self.state.user_inputs[key] = answer
        return answer

    def get_user_input(self, key: str) -> Optional[str]:
        return self.state.user_inputs.get(key)

    @property
    def user_inputs(self) -> Dict[str, str]:
        return dict(self.state.user_inputs)

    def _install_file(
        self,
        vendor_app: str,
        source: str,
        destination: str,
        transform: Optional[Transform],
    ) -> None:
        if not source or not destination:
            raise InstallerError("nor source, nor destination may be empty")

        source = source.replace("\\", "/")
        destination = destination.replace("\\", "/")

        src = Path(as_dir(self.get_vendor_app_uri(vendor_app)) + source)
        if not src.is_file():
            raise NotFoundError("source file not found")

        contents: Contents = src.read_bytes()
        if transform is not None:
            contents = _apply_transform(transform, contents)

        parent = os.path.dirname(destination)
        if parent and not Path(parent).exists():
            raise NotFoundError("destination dir does not exist")

        write_file(Path(destination), contents)
        logger.debug("Installed %s -> %s", src, destination)

    def file(
        self,
        vendor_app: str,
        source: str,
        destination: str,
        transform: Optional[Transform] = None,
    ) -> OpResult:
        """Copy one file of a vendor app, optionally transforming its text."""

        self.oplog.begin(f" => will install file: {source} from app {vendor_app} ... ")
        try:
            self._install_file(vendor_app, source, destination, transform)
        except RECOVERABLE as e:
            return self._fail("file", e)
        return self._done()

    def file_ifne(
        self,
        vendor_app: str,
        source: str,
        destination: str,
        transform: Optional[Transform] = None,
    ) -> OpResult:
        """Like `file`, but only when destination does not exist yet."""

        target = destination.replace("\\", "/")
        if not target or not Path(target).exists():
            return self.file(vendor_app, source, destination, transform)

        return self._skip(
            f" => will NOT install file: {source} from app {vendor_app} cause file already exists",
            "file already exists",
        )

    def set_file_contents_ife(self, uri: str, contents: Contents) -> OpResult:
        target = normalize(uri)
        if target and not Path(target).exists():
            return self._skip(
                f" => will NOT set contents of a file: {uri} cause file does not exist",
                "file does not exist",
            )

        self.oplog.begin(f" => will set contents of a file: {uri} ... ")
        try:
            if not target:
                raise InstallerError("uri may not be empty")
            write_file_if_exists(target, contents)
        except RECOVERABLE as e:
            return self._fail("set_file_contents_ife", e)
        return self._done()

    def set_file_contents_ifne(self, uri: str, contents: Contents) -> OpResult:
        target = normalize(uri)
        if target and Path(target).is_file():
            return self._skip(
                f" => will NOT set contents of a file: {uri} cause file already exists",
                "file already exists",
            )

        self.oplog.begin(f" => will set contents of a file: {uri} ... ")
        try:
            if not target:
                raise InstallerError("uri may not be empty")
            if Path(target).exists():
                raise ConflictError("uri is already taken by something other than file")
            write_file_if_absent(target, contents)
        except RECOVERABLE as e:
            return self._fail("set_file_contents_ifne", e)
        return self._done()

    def make_dir(self, directory: str) -> OpResult:
        self.oplog.begin(f" => will create empty dir: {directory} ... ")
        try:
            created = make_dir_chain(directory)
        except RECOVERABLE as e:
            return self._fail("make_dir", e)
        if not created:
            return self._skip("already exists", "already exists")
        return self._done()

    def dir(self, vendor_app: str, source: str, destination: str) -> OpResult:
        """Mirror a vendor app directory into destination (never merges)."""

        self.oplog.begin(f" => will install dir: {source} from app {vendor_app} ... ")
        try:
            if not source or not destination:
                raise InstallerError("nor source, nor destination may be empty - use `.` (dot) instead")
            src = as_dir(self.get_vendor_app_uri(vendor_app)) + as_dir(source)
            copy_tree(src, destination)
        except RECOVERABLE as e:
            return self._fail("dir", e)
        return self._done()

    def empty_dir_recursively(self, directory: str) -> OpResult:
        self.oplog.begin(f" => will recursively empty a dir: {directory} ... ")
        try:
            empty_tree(directory)
        except RECOVERABLE as e:
            return self._fail("empty_dir_recursively", e)
        return self._done()
