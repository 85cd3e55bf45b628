from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
import shlex
import subprocess
import time
import traceback
from typing import Callable

from sqlalchemy.orm import Session

from studio.core.config import Settings, get_settings, require_setting
from studio.models import ModuleRecorder, StudioConfiguration
from studio.services.observability import emit_structured_log

DEFAULT_BUILD_COMMAND = ["./gradlew", "clean", "-x", "test", "build"]


@dataclass
class BuildCommandResult:
    exit_code: int | None
    timed_out: bool
    duration_seconds: float
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


def resolve_build_command(*, db: Session) -> list[str]:
    config = db.query(StudioConfiguration).order_by(StudioConfiguration.id.asc()).first()
    if config is not None and config.build_cmd:
        command = shlex.split(config.build_cmd)
        if command:
            return command
    return list(DEFAULT_BUILD_COMMAND)


def build_subprocess_env(*, env_var: str, install_home: str) -> dict[str, str]:
    env = dict(os.environ)
    env[env_var] = install_home
    return env


def run_build_command(
    *,
    command: list[str],
    build_dir: Path,
    env: dict[str, str],
    timeout_seconds: int | None = None,
    popen_factory: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
    time_fn: Callable[[], float] = time.monotonic,
) -> BuildCommandResult:
    """Run the build and capture its combined output.

    stderr is merged into stdout so a single pipe is drained until the child
    closes it. Raises ``OSError`` if the command cannot be started.
    """
    start = time_fn()
    process = popen_factory(
        command,
        cwd=str(build_dir),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        env=env,
    )
    timed_out = False
    try:
        output, _ = process.communicate(timeout=timeout_seconds)
    except subprocess.TimeoutExpired as exc:
        timed_out = True
        process.kill()
        remainder, _ = process.communicate()
        partial = exc.output if isinstance(exc.output, str) else ""
        output = partial + (remainder or "")

    return BuildCommandResult(
        exit_code=process.returncode,
        timed_out=timed_out,
        duration_seconds=max(0.0, time_fn() - start),
        output=output or "",
    )


def update_module_recorder(*, db: Session, recorder: ModuleRecorder, log_text: str | None, ok: bool) -> ModuleRecorder:
    row = db.get(ModuleRecorder, recorder.id)
    if row is None:
        row = recorder
    row.log_text = log_text
    row.last_run_ok = ok
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def build_app(
    *,
    db: Session,
    recorder: ModuleRecorder,
    settings: Settings | None = None,
    popen_factory: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
) -> bool:
    settings = settings or get_settings()
    log_text = ""
    ok = False
    try:
        build_dir = require_setting("Build directory", settings.build_dir)
        install_home = require_setting("Install home", settings.install_home)
        command = resolve_build_command(db=db)
        emit_structured_log(
            component="build",
            event="build_started",
            recorder_id=recorder.id,
            command=command,
            build_dir=build_dir,
        )
        result = run_build_command(
            command=command,
            build_dir=Path(build_dir).expanduser(),
            env=build_subprocess_env(env_var=settings.install_home_env_var, install_home=install_home),
            timeout_seconds=settings.build_timeout_seconds,
            popen_factory=popen_factory,
        )
        log_text = result.output
        if result.timed_out:
            log_text += f"\nBuild timed out after {settings.build_timeout_seconds} seconds\n"
        ok = result.ok
        emit_structured_log(
            component="build",
            event="build_finished",
            level=logging.INFO if ok else logging.WARNING,
            recorder_id=recorder.id,
            exit_code=result.exit_code,
            timed_out=result.timed_out,
            duration_seconds=round(result.duration_seconds, 2),
        )
    except (ValueError, OSError, subprocess.SubprocessError):
        log_text += traceback.format_exc()
        ok = False
        emit_structured_log(component="build", event="build_errored", level=logging.ERROR, recorder_id=recorder.id)
    finally:
        update_module_recorder(db=db, recorder=recorder, log_text=log_text, ok=ok)

    return ok
