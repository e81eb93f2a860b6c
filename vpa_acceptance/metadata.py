# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ReleaseMetadata:
    """Snapshot of the helm release reported by the component's ``metadata`` output."""

    chart: str
    name: str
    namespace: str
    revision: int
    version: Optional[str] = None
    app_version: Optional[str] = None
    first_deployed: Optional[Any] = None
    last_deployed: Optional[Any] = None
    values: Optional[Any] = None
    notes: Optional[str] = None

    @classmethod
    def from_output(cls, output: Any) -> "ReleaseMetadata":
        """Decode the helm_release metadata output.

        Older helm providers expose metadata as a single-element list.
        """
        if isinstance(output, list):
            if len(output) != 1:
                raise ValueError(
                    f"Expected exactly one metadata entry, got {len(output)}"
                )
            output = output[0]
        if not isinstance(output, dict):
            raise ValueError(f"Release metadata must be an object, got {output!r}")

        values = output.get("values")
        if isinstance(values, str) and values:
            values = json.loads(values)

        return cls(
            chart=output.get("chart", ""),
            name=output.get("name", ""),
            namespace=output.get("namespace", ""),
            revision=int(output.get("revision") or 0),
            version=output.get("version"),
            app_version=output.get("app_version"),
            first_deployed=output.get("first_deployed"),
            last_deployed=output.get("last_deployed"),
            values=values,
            notes=output.get("notes"),
        )

    def validate(self, expected_chart: str, namespace: str) -> None:
        """Check the invariants of a fresh deployment.

        Raises:
            AssertionError: If any invariant does not hold
        """
        assert self.chart == expected_chart, (
            f"Expected chart '{expected_chart}', got '{self.chart}'"
        )
        assert self.first_deployed is not None, "Release has no first_deployed time"
        assert self.last_deployed is not None, "Release has no last_deployed time"
        assert self.name, "Release name is empty"
        assert self.namespace == namespace, (
            f"Expected release namespace '{namespace}', got '{self.namespace}'"
        )
        assert self.revision == 1, (
            f"Expected revision 1 for a fresh release, got {self.revision}"
        )
        assert self.values is not None, "Release has no values"

    def summary(self) -> Dict[str, Any]:
        return {
            "chart": self.chart,
            "name": self.name,
            "namespace": self.namespace,
            "revision": self.revision,
            "version": self.version,
        }
