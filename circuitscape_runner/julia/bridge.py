#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Run Circuitscape.jl in an external Julia process.

Julia is located on the machine, Circuitscape.jl is checked (and installed
only when asked to), then ``compute`` is called with the path of a written
.ini file. Output from Julia is captured and forwarded to the log.
"""
import enum
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional

from circuitscape_runner.core.config import JULIA_CONFIG
from circuitscape_runner.core.logging_config import get_module_logger
from circuitscape_runner.utils.utils import timer, working_directory

logger = get_module_logger(__name__)


class JuliaNotFoundError(RuntimeError):
    """No usable Julia executable was found."""


class CircuitscapeNotInstalledError(RuntimeError):
    """Circuitscape.jl is not available in the Julia environment."""


class CircuitscapeRunError(RuntimeError):
    """Circuitscape.jl exited with an error."""

    def __init__(self, message: str, returncode: int, output: List[str]):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class InstallStatus(enum.Enum):
    ALREADY_PRESENT = "already-present"
    INSTALLED = "installed"
    MISSING = "missing"
    FAILED = "failed"


@dataclass
class DependencyCheck:
    """Outcome of making sure a Julia package is available."""
    name: str
    status: InstallStatus
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (InstallStatus.ALREADY_PRESENT, InstallStatus.INSTALLED)


@dataclass
class RunResult:
    """What came back from a Circuitscape.jl run."""
    command: List[str]
    returncode: int
    output: List[str] = field(default_factory=list)
    ini_path: str = ""


def _julia_command(julia: str, code: str, *args: str) -> List[str]:
    return [julia, *JULIA_CONFIG["julia_flags"], "-e", code, *args]


def _run_julia(command: List[str]) -> subprocess.CompletedProcess:
    logger.debug(f"Executing command: {' '.join(command)}")
    return subprocess.run(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        check=False,
    )


def find_julia(julia_executable: Optional[str] = None) -> str:
    """
    Locate the Julia executable.

    Looks at ``julia_executable``, then the ``JULIA_EXE`` environment
    variable, then ``julia`` on ``PATH``.

    Returns
    -------
    str
        Full path of the executable.

    Raises
    ------
    JuliaNotFoundError
        If none of the candidates resolves to an executable.
    """
    candidate = (julia_executable
                 or os.environ.get(JULIA_CONFIG["env_var"])
                 or JULIA_CONFIG["executable"])

    resolved = shutil.which(candidate)
    if resolved is None:
        raise JuliaNotFoundError(
            f"Julia executable '{candidate}' was not found. Install Julia from "
            f"{JULIA_CONFIG['install_url']} (or with juliaup), then put it on PATH, "
            f"set {JULIA_CONFIG['env_var']}, or pass the path explicitly."
        )

    logger.debug(f"Julia executable: {resolved}")
    return resolved


def ensure_circuitscape(julia: str, install: bool = False) -> DependencyCheck:
    """
    Make sure Circuitscape.jl can be loaded by ``julia``.

    Parameters
    ----------
    julia : str
        Julia executable.
    install : bool, optional
        Run ``Pkg.add`` when the package is missing, by default False.

    Returns
    -------
    DependencyCheck
        ``ALREADY_PRESENT``, ``INSTALLED``, ``MISSING`` (absent and
        installation not requested) or ``FAILED`` (installation did not work).
    """
    package = JULIA_CONFIG["package"]
    probe = _run_julia(_julia_command(
        julia, f'exit(Base.find_package("{package}") === nothing ? 1 : 0)'
    ))
    if probe.returncode == 0:
        logger.debug(f"{package}.jl is already installed")
        return DependencyCheck(package, InstallStatus.ALREADY_PRESENT)

    if not install:
        return DependencyCheck(package, InstallStatus.MISSING, (probe.stdout or "").strip())

    logger.info(f"{package}.jl not found. Installing now...")
    result = _run_julia(_julia_command(
        julia, f'import Pkg; Pkg.add("{package}"); using {package}'
    ))
    output = (result.stdout or "").strip()
    if result.returncode != 0:
        logger.error(f"Installing {package}.jl failed with exit code {result.returncode}")
        return DependencyCheck(package, InstallStatus.FAILED, output)

    logger.info(f"Installed {package}.jl")
    return DependencyCheck(package, InstallStatus.INSTALLED, output)


def require_circuitscape(julia: str, install: bool = False) -> DependencyCheck:
    """
    Like :func:`ensure_circuitscape`, but raise when the package is unusable.

    Raises
    ------
    CircuitscapeNotInstalledError
        If the package is missing or its installation failed.
    """
    check = ensure_circuitscape(julia, install=install)
    if check.ok:
        return check

    package = check.name
    manual = f"""{julia} -e 'import Pkg; Pkg.add("{package}")'"""
    if check.status is InstallStatus.MISSING:
        message = (f"{package}.jl is not installed for {julia}. Pass install_missing=True "
                   f"(--install-missing on the command line) or run: {manual}")
    else:
        message = f"Installing {package}.jl failed. Try manually: {manual}"
    if check.detail:
        message = f"{message}\n{check.detail}"
    raise CircuitscapeNotInstalledError(message)


@timer
def run_circuitscape(ini_path: str,
                     julia: str,
                     working_dir: Optional[str] = None) -> RunResult:
    """
    Call Circuitscape.jl ``compute`` on a config file.

    Parameters
    ----------
    ini_path : str
        Path of the .ini file, passed as the only argument to ``compute``.
    julia : str
        Julia executable.
    working_dir : str, optional
        Directory to run in. The previous working directory is restored
        afterwards, also when the run fails.

    Returns
    -------
    RunResult
        Command, exit code and captured output lines.

    Raises
    ------
    CircuitscapeRunError
        If Julia exits with a non-zero code.
    """
    ini_path = os.path.abspath(ini_path)
    package = JULIA_CONFIG["package"]
    command = _julia_command(
        julia, f"using {package}; {JULIA_CONFIG['entry_point']}(ARGS[1])", ini_path
    )

    with working_directory(working_dir):
        logger.info(">>> Starting Circuitscape.jl execution <<<")
        completed = _run_julia(command)

    output = (completed.stdout or "").splitlines()
    for line in output:
        logger.info(f"[julia] {line}")

    logger.info(f">>> Circuitscape.jl execution completed with exit code: {completed.returncode} <<<")

    if completed.returncode != 0:
        tail = "\n".join(output[-20:])
        raise CircuitscapeRunError(
            f"Circuitscape.jl failed with exit code {completed.returncode}. "
            f"Check the Julia output for errors.\n{tail}",
            completed.returncode,
            output,
        )

    return RunResult(command=command, returncode=completed.returncode,
                     output=output, ini_path=ini_path)
