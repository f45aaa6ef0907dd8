import io
import json
import logging
import os
import platform
import typing as T

import sarge

from sfexport.core.exceptions import MalformedResponseError, SfdxCommandError

logger = logging.getLogger(__name__)

RETRIEVE_ARCHIVE_NAME = "unpackaged.zip"


def sfdx(
    command,
    username=None,
    log_note=None,
    args: T.Optional[T.List[str]] = None,
    env=None,
    capture_output=True,
    check_return=False,
):
    """Call an sf command and capture its output.

    Be sure to quote user input that is part of the command using `shell_quote`.

    Returns a `sarge` Command instance with returncode, stdout, stderr
    """
    command = f"sf {command}"
    if args is not None:
        for arg in args:
            command += " " + shell_quote(arg)
    if username:
        command += f" -o {shell_quote(username)}"
    if log_note:
        logger.info(f"{log_note} with command: {command}")
    env = env or {}
    p = sarge.Command(
        command,
        stdout=sarge.Capture(buffer_size=-1) if capture_output else None,
        stderr=sarge.Capture(buffer_size=-1) if capture_output else None,
        shell=True,
        env={**env, "SFDX_TOOL": "SFEXPORT"},
    )
    p.run()
    if capture_output:
        p.stdout_text = io.TextIOWrapper(p.stdout, encoding="utf-8")
        p.stderr_text = io.TextIOWrapper(p.stderr, encoding="utf-8")
    if check_return and p.returncode:
        message = f"Command exited with return code {p.returncode}"
        stderr = None
        if capture_output:
            stderr = p.stderr_text.read()
            message += f":\n{stderr}"
        raise SfdxCommandError(message, returncode=p.returncode, stderr=stderr)
    return p


def shell_quote(s: str):
    if platform.system() == "Windows":
        assert isinstance(s, str)
        if not s:
            result = '""'
        elif '"' not in s:
            result = s
            if " " in result:
                result = f'"{result}"'
        else:
            escaped = s.replace('"', r"\"")
            result = f'"{escaped}"'

        return result
    else:
        return sarge.shell_quote(s)


def _load_json_result(p, description):
    """Decode the `--json` envelope written by the sf CLI and return its result."""
    stdout = p.stdout_text.read()
    try:
        data = json.loads(stdout)
    except ValueError:
        if p.returncode:
            raise SfdxCommandError(
                f"Couldn't {description}: command exited with return code {p.returncode}:\n"
                f"{p.stderr_text.read() or stdout}",
                returncode=p.returncode,
            )
        raise MalformedResponseError(
            f"Couldn't {description}: sf returned invalid JSON:\n{stdout}"
        )

    if p.returncode or not isinstance(data, dict) or data.get("status", 0):
        message = data.get("message") if isinstance(data, dict) else None
        raise SfdxCommandError(
            f"Couldn't {description}: {message or stdout}",
            returncode=p.returncode,
        )

    if "result" not in data:
        raise MalformedResponseError(
            f"Couldn't {description}: no result in sf output:\n{stdout}"
        )
    return data["result"]


class SfdxBackend:
    """Runs the queries and the retrieve that an export needs through the sf CLI.

    Every call blocks until the CLI exits. Failures are raised as
    `SfdxCommandError` (non-zero exit) or `MalformedResponseError`
    (output that doesn't have the expected shape).
    """

    def __init__(self, username, api_version=None, logger=None):
        self.username = username
        self.api_version = api_version
        self.logger = logger or logging.getLogger(__name__)

    def _api_version_args(self):
        return ["--api-version", self.api_version] if self.api_version else []

    def query(self, soql: str) -> T.List[dict]:
        """Run a SOQL query and return its records."""
        p = sfdx(
            "data query",
            username=self.username,
            args=["--query", soql, "--json"],
            log_note="Querying",
        )
        result = _load_json_result(p, f"run query `{soql}`")
        try:
            records = result["records"]
        except (KeyError, TypeError):
            raise MalformedResponseError(
                f"Couldn't run query `{soql}`: no records in sf output"
            )
        if not isinstance(records, list) or not all(
            isinstance(record, dict) for record in records
        ):
            raise MalformedResponseError(
                f"Couldn't run query `{soql}`: records is not a list of records"
            )
        return records

    def list_standard_objects(self) -> T.List[str]:
        """List the names of the org's standard objects, one per line of output."""
        p = sfdx(
            "sobject list",
            username=self.username,
            args=["--sobject", "standard"],
            log_note="Listing standard objects",
            check_return=True,
        )
        return [line.strip() for line in p.stdout_text.read().splitlines() if line.strip()]

    def list_metadata_types(self) -> T.List[str]:
        """List the metadata type names the org supports, in the order sf reports them.

        Child types follow their parent type. Names are de-duplicated
        keeping their first position.
        """
        p = sfdx(
            "org list metadata-types",
            username=self.username,
            args=self._api_version_args() + ["--json"],
            log_note="Listing metadata types",
        )
        result = _load_json_result(p, "load list of metadata types")
        try:
            metadata_objects = result["metadataObjects"]
        except (KeyError, TypeError):
            raise MalformedResponseError(
                "Couldn't load list of metadata types: no metadataObjects in sf output"
            )

        if not isinstance(metadata_objects, list):
            raise MalformedResponseError(
                "Couldn't load list of metadata types: metadataObjects is not a list"
            )

        types = []
        for metadata_object in metadata_objects:
            if not isinstance(metadata_object, dict) or not isinstance(
                metadata_object.get("xmlName"), str
            ):
                raise MalformedResponseError(
                    f"Couldn't load list of metadata types: invalid entry {metadata_object!r}"
                )
            child_names = metadata_object.get("childXmlNames") or []
            if not isinstance(child_names, list) or not all(
                isinstance(name, str) for name in child_names
            ):
                raise MalformedResponseError(
                    "Couldn't load list of metadata types: invalid childXmlNames "
                    f"for {metadata_object['xmlName']}"
                )
            types.append(metadata_object["xmlName"])
            types.extend(child_names)
        return list(dict.fromkeys(types))

    def retrieve(self, manifest_path, target_dir) -> str:
        """Retrieve the metadata listed in `manifest_path` as a zip in `target_dir`.

        Returns the path of the archive.
        """
        sfdx(
            "project retrieve start",
            username=self.username,
            args=[
                "--manifest",
                str(manifest_path),
                "--target-metadata-dir",
                str(target_dir),
            ]
            + self._api_version_args(),
            log_note="Retrieving metadata",
            check_return=True,
        )
        return os.path.join(str(target_dir), RETRIEVE_ARCHIVE_NAME)
