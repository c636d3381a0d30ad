"""Prow results provider reading job artifacts from GCS."""

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone

import aiohttp

from psap.ci_dashboard.messages import classify_log
from psap.ci_dashboard.models.matrix import MatrixSpec, TestSpec
from psap.ci_dashboard.models.prow_config import ProwGCSConfig
from psap.ci_dashboard.models.test_result import TestResult
from psap.ci_dashboard.providers.base import ResultsProvider
from psap.ci_dashboard.step_log import parse_toolbox_steps

logger = logging.getLogger(__name__)

_PRESUBMIT_POINTER = re.compile(r"/(?P<build_id>\d+)\.txt$")


class ProwGCSProvider(ResultsProvider):
    """Fetch Prow job results from the GCS bucket Prow uploads to."""

    def __init__(self, config: ProwGCSConfig) -> None:
        """Initialize Prow provider with configuration."""
        self.config = config

    async def list_builds(self, matrix: MatrixSpec, test: TestSpec) -> list[str]:
        """List the builds of the test job, most recent first."""
        if matrix.effective_prow_type(test) == "presubmit":
            prefix = f"pr-logs/directory/{test.prow_name}/"
        else:
            prefix = f"logs/{test.prow_name}/"

        prefixes, items = await self._list_objects(prefix)

        build_ids: set[str] = set()
        for sub_prefix in prefixes:
            build_id = sub_prefix.rstrip("/").rsplit("/", 1)[-1]
            if build_id.isdigit():
                build_ids.add(build_id)
        for item in items:
            pointer = _PRESUBMIT_POINTER.search(item)
            if pointer is not None:
                build_ids.add(pointer.group("build_id"))

        logger.debug(f"Found {len(build_ids)} builds under {prefix}")
        return sorted(build_ids, key=int, reverse=True)

    async def fetch_result(
        self, matrix: MatrixSpec, test: TestSpec, build_id: str
    ) -> TestResult:
        """Fetch job outcome, step outcome and step log of one build."""
        async with aiohttp.ClientSession() as session:
            pull_number = ""
            if matrix.effective_prow_type(test) == "presubmit":
                build_path, pull_number = await self._resolve_presubmit_build(
                    session, test, build_id
                )
            else:
                build_path = f"logs/{test.prow_name}/{build_id}"

            finished = await self._get_json(session, f"{build_path}/finished.json")
            if finished is None:
                raise RuntimeError(f"Build {build_path} has no finished.json")

            step = test.prow_step or matrix.prow_step
            step_path = f"{build_path}/artifacts/{test.test_name}/{step}"
            step_finished = await self._get_json(session, f"{step_path}/finished.json")
            step_log = await self._get_text(session, f"{step_path}/build-log.txt")

        step_passed = None
        step_result = ""
        if step_finished is not None:
            passed = step_finished.get("passed")
            step_passed = passed if isinstance(passed, bool) else None
            step_result = str(step_finished.get("result", ""))

        messages = classify_log(step_log, step) if step_log else {}
        toolbox_steps = parse_toolbox_steps(step_log) if step_log else []

        return TestResult(
            build_id=build_id,
            passed=finished.get("passed") is True,
            result=str(finished.get("result", "")),
            finish_date=_format_timestamp(finished.get("timestamp")),
            step_executed=step_finished is not None,
            step_passed=step_passed,
            step_result=step_result,
            messages=messages,
            ci_artifacts_version=_revision(finished),
            pull_number=pull_number,
            test_spec=test,
            toolbox_steps=tuple(s.name for s in toolbox_steps),
            toolbox_steps_results=tuple(toolbox_steps),
            ok=sum(s.ok for s in toolbox_steps),
            failures=sum(s.failures for s in toolbox_steps),
            ignored=sum(s.ignored for s in toolbox_steps),
            flake_failure=any(s.flake_failure for s in toolbox_steps),
        )

    async def _resolve_presubmit_build(
        self, session: aiohttp.ClientSession, test: TestSpec, build_id: str
    ) -> tuple[str, str]:
        """Follow the presubmit directory pointer to the real build location."""
        pointer_path = f"pr-logs/directory/{test.prow_name}/{build_id}.txt"
        pointer = await self._get_text(session, pointer_path)
        if not pointer:
            raise RuntimeError(f"Presubmit pointer not found: {pointer_path}")

        location = pointer.strip()
        bucket_prefix = f"gs://{self.config.bucket}/"
        if location.startswith(bucket_prefix):
            location = location[len(bucket_prefix) :]

        # pr-logs/pull/{repo}/{pull_number}/{job}/{build_id}
        parts = location.rstrip("/").split("/")
        pull_number = parts[-3] if len(parts) >= 3 else ""
        return location, pull_number

    async def _list_objects(self, prefix: str) -> tuple[list[str], list[str]]:
        """List the sub-prefixes and object names directly under a prefix."""
        url = f"{self.config.api_url}/b/{self.config.bucket}/o"
        prefixes: list[str] = []
        items: list[str] = []
        page_token: str | None = None

        async with aiohttp.ClientSession() as session:
            while True:
                params = {
                    "prefix": prefix,
                    "delimiter": "/",
                    "maxResults": str(self.config.max_builds_listed),
                    "fields": "prefixes,items(name),nextPageToken",
                }
                if page_token:
                    params["pageToken"] = page_token

                async with session.get(url, params=params) as response:
                    if response.status != 200:
                        text = await response.text()
                        raise RuntimeError(
                            f"Failed to list {prefix}: {response.status} {text}"
                        )
                    data: Mapping[str, object] = await response.json()

                prefixes.extend(str(p) for p in _as_list(data.get("prefixes")))
                items.extend(
                    str(item["name"])
                    for item in _as_list(data.get("items"))
                    if isinstance(item, dict) and "name" in item
                )

                next_token = data.get("nextPageToken")
                if not isinstance(next_token, str) or not next_token:
                    break
                page_token = next_token

        return prefixes, items

    def _object_url(self, path: str) -> str:
        return f"{self.config.download_url}/{self.config.bucket}/{path}"

    async def _get_json(
        self, session: aiohttp.ClientSession, path: str
    ) -> Mapping[str, object] | None:
        """Download a JSON object, None when it doesn't exist."""
        async with session.get(self._object_url(path)) as response:
            if response.status == 404:
                return None
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(f"Failed to get {path}: {response.status} {text}")
            data: Mapping[str, object] = await response.json(content_type=None)
        return data

    async def _get_text(self, session: aiohttp.ClientSession, path: str) -> str:
        """Download a text object, empty when it doesn't exist."""
        async with session.get(self._object_url(path)) as response:
            if response.status == 404:
                return ""
            if response.status != 200:
                text = await response.text()
                raise RuntimeError(f"Failed to get {path}: {response.status} {text}")
            return await response.text()


def _as_list(value: object) -> list[object]:
    return value if isinstance(value, list) else []


def _format_timestamp(timestamp: object) -> str:
    if not isinstance(timestamp, int | float):
        return ""
    finished = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return finished.strftime("%Y-%m-%d %H:%M")


def _revision(finished: Mapping[str, object]) -> str:
    """Commit of the sources the build ran with."""
    revision = finished.get("revision")
    if isinstance(revision, str) and revision:
        return revision
    metadata = finished.get("metadata")
    if isinstance(metadata, dict):
        return str(metadata.get("repo-commit", ""))
    return ""
