# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Atmos/terraform provisioning used to deploy and destroy components.

Every operation shells out to the ``atmos`` CLI. Input overrides are
written to a ``.tfvars.json`` var-file so arbitrary values (booleans,
maps) survive the trip to terraform unchanged.
"""

import asyncio
import json
import logging
import os
import re
import signal
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# terraform plan -detailed-exitcode
PLAN_NO_CHANGES = 0
PLAN_HAS_CHANGES = 2

# Seconds terraform gets to release its state lock after SIGINT
DEFAULT_KILL_GRACE_PERIOD = 30.0


class ProvisioningError(RuntimeError):
    """An atmos command failed."""

    def __init__(self, command: List[str], returncode: Optional[int], stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Command {' '.join(command)} failed with exit code {returncode}: "
            f"{stderr.strip()[-2000:]}"
        )


class DriftDetectedError(ProvisioningError):
    """terraform plan found differences between configuration and live state."""


@dataclass
class CommandResult:
    command: List[str]
    returncode: int
    stdout: str
    stderr: str


@dataclass
class DeploymentHandle:
    """Outputs of a deployed component together with the inputs it was deployed with."""

    component: str
    stack: str
    inputs: Dict[str, Any] = field(default_factory=dict)
    outputs: Dict[str, Any] = field(default_factory=dict)

    def output(self, key: str) -> str:
        value = self.output_struct(key)
        if isinstance(value, str):
            return value
        return json.dumps(value)

    def output_struct(self, key: str) -> Any:
        if key not in self.outputs:
            raise KeyError(
                f"Output '{key}' not found for component {self.component} "
                f"(stack {self.stack}); available: {sorted(self.outputs)}"
            )
        return self.outputs[key]


def _var_file_name(component: str, stack: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]", "-", f"{component}-{stack}") + ".tfvars.json"


def decode_outputs(raw: str) -> Dict[str, Any]:
    """Decode ``terraform output -json`` into a plain ``{name: value}`` mapping."""
    if not raw.strip():
        return {}
    data = json.loads(raw)
    return {name: entry.get("value") for name, entry in data.items()}


def collect_managed_resources(state: Dict[str, Any]) -> List[str]:
    """Addresses of managed resources in ``terraform show -json`` output."""
    addresses: List[str] = []

    def walk(module: Dict[str, Any]):
        for resource in module.get("resources", []):
            if resource.get("mode") == "managed":
                addresses.append(resource["address"])
        for child in module.get("child_modules", []):
            walk(child)

    root = state.get("values", {}).get("root_module")
    if root:
        walk(root)
    return addresses


@dataclass
class AtmosProvisioner:
    """Deploys components with ``atmos terraform``.

    Attributes:
        atmos_bin: atmos executable
        base_path: Exported as ATMOS_BASE_PATH when set
        command_timeout: Seconds before a single command is killed
        env: Extra environment variables for every command
        kill_grace_period: Seconds between SIGINT and SIGKILL when a
            command is interrupted

    Var-files live in a temporary directory that ``close()`` removes.
    """

    atmos_bin: str = "atmos"
    base_path: Optional[str] = None
    command_timeout: Optional[float] = None
    env: Dict[str, str] = field(default_factory=dict)
    kill_grace_period: float = DEFAULT_KILL_GRACE_PERIOD

    _var_dir: Optional[tempfile.TemporaryDirectory] = field(
        default=None, init=False, repr=False
    )

    def close(self) -> None:
        """Remove the var-file directory and every input written to it"""
        if self._var_dir is not None:
            self._var_dir.cleanup()
            self._var_dir = None

    def _environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["TF_IN_AUTOMATION"] = "1"
        if self.base_path:
            env["ATMOS_BASE_PATH"] = self.base_path
        env.update(self.env)
        return env

    def _write_var_file(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]]
    ) -> List[str]:
        if not inputs:
            return []
        if self._var_dir is None:
            self._var_dir = tempfile.TemporaryDirectory(prefix="atmos_inputs_")
        path = os.path.join(self._var_dir.name, _var_file_name(component, stack))
        with open(path, "w") as f:
            json.dump(inputs, f, indent=2, sort_keys=True)
        return [f"-var-file={path}"]

    async def _run(self, args: List[str], check: bool = True) -> CommandResult:
        command = [self.atmos_bin, *args]
        logger.info(f"Running: {' '.join(command)}")

        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=self._environment(),
            # own process group so terraform children are signalled with atmos
            start_new_session=True,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.command_timeout
            )
        except asyncio.TimeoutError:
            await self._terminate(proc)
            raise ProvisioningError(
                command, None, f"timed out after {self.command_timeout}s"
            )
        except BaseException:
            # cancelled from outside: the command must not outlive the caller
            await self._terminate(proc)
            raise

        result = CommandResult(
            command=command,
            returncode=proc.returncode,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
        if check and result.returncode != 0:
            logger.debug(f"stdout of failed command:\n{result.stdout}")
            raise ProvisioningError(command, result.returncode, result.stderr)
        return result

    async def _terminate(self, proc: asyncio.subprocess.Process) -> None:
        """Stop the command's process group: SIGINT first so terraform can
        release its state lock, SIGKILL once the grace period is over."""
        if proc.returncode is not None:
            return
        logger.warning(f"Interrupting atmos process {proc.pid}")
        try:
            os.killpg(proc.pid, signal.SIGINT)
            try:
                await asyncio.wait_for(proc.wait(), timeout=self.kill_grace_period)
                return
            except asyncio.TimeoutError:
                logger.warning(f"atmos process {proc.pid} ignored SIGINT, killing")
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        await proc.wait()

    async def deploy(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> DeploymentHandle:
        """Apply the component and return its outputs"""
        var_args = self._write_var_file(component, stack, inputs)
        await self._run(
            ["terraform", "apply", component, "-s", stack, "-auto-approve", *var_args]
        )
        outputs = await self.outputs(component, stack)
        logger.info(f"Deployed {component} (stack {stack}) with {len(outputs)} outputs")
        return DeploymentHandle(
            component=component,
            stack=stack,
            inputs=dict(inputs or {}),
            outputs=outputs,
        )

    async def destroy(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        var_args = self._write_var_file(component, stack, inputs)
        await self._run(
            ["terraform", "destroy", component, "-s", stack, "-auto-approve", *var_args]
        )
        logger.info(f"Destroyed {component} (stack {stack})")

    async def outputs(self, component: str, stack: str) -> Dict[str, Any]:
        result = await self._run(["terraform", "output", component, "-s", stack, "-json"])
        return decode_outputs(result.stdout)

    async def output(self, component: str, stack: str, key: str) -> str:
        """Single output of an already deployed component"""
        handle = DeploymentHandle(
            component=component,
            stack=stack,
            outputs=await self.outputs(component, stack),
        )
        return handle.output(key)

    async def drift_check(
        self, component: str, stack: str, inputs: Optional[Dict[str, Any]] = None
    ) -> None:
        """Re-plan the component and fail if live state differs from configuration."""
        var_args = self._write_var_file(component, stack, inputs)
        result = await self._run(
            [
                "terraform",
                "plan",
                component,
                "-s",
                stack,
                "-detailed-exitcode",
                *var_args,
            ],
            check=False,
        )
        if result.returncode == PLAN_NO_CHANGES:
            logger.info(f"No drift detected for {component} (stack {stack})")
            return
        if result.returncode == PLAN_HAS_CHANGES:
            logger.error(f"Drift detected for {component}:\n{result.stdout}")
            raise DriftDetectedError(result.command, result.returncode, result.stdout)
        raise ProvisioningError(result.command, result.returncode, result.stderr)

    async def managed_resources(self, component: str, stack: str) -> List[str]:
        result = await self._run(["terraform", "show", component, "-s", stack, "-json"])
        if not result.stdout.strip():
            return []
        return collect_managed_resources(json.loads(result.stdout))
