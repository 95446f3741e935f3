"""tmux session provider.

All tasks of a project share one tmux session named after the project; each
task gets its own window. Commands run through `asyncio.create_subprocess_exec`.
"""

from __future__ import annotations

import asyncio

from agtx.core.errors import SessionError, WindowMissingError
from agtx.logging_config import get_logger

logger = get_logger(__name__)

# stderr fragments tmux prints when the target (or the whole server) is gone
_MISSING_TARGET_MARKERS = (
    "can't find window",
    "can't find session",
    "session not found",
    "window not found",
    "no server running",
    "error connecting to",
)


def is_missing_target(stderr: str) -> bool:
    lowered = stderr.lower()
    return any(marker in lowered for marker in _MISSING_TARGET_MARKERS)


def split_target(target: str) -> tuple[str, str]:
    """Split `session:window` into its parts."""
    session, sep, window = target.partition(":")
    if not sep or not session or not window:
        raise ValueError(f"Invalid tmux target '{target}', expected 'session:window'")
    return session, window


def exact_target(target: str) -> str:
    """`session:window` with both parts pinned to exact-name matching."""
    session, window = split_target(target)
    return f"={session}:={window}"


class TmuxSessionProvider:
    """Creates, kills, and types into task windows."""

    def __init__(self, *, binary: str = "tmux", enter_delay: float = 0.1) -> None:
        self._binary = binary
        self._enter_delay = enter_delay

    async def _run(self, *args: str) -> tuple[int, str, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise SessionError(f"Cannot run {self._binary}: {exc}") from exc
        stdout, stderr = await process.communicate()
        return (
            process.returncode if process.returncode is not None else -1,
            stdout.decode(errors="replace").strip(),
            stderr.decode(errors="replace").strip(),
        )

    async def _spawn(self, *args: str) -> int:
        """Run a tmux command that may start the server.

        No pipes: the server inherits them and they would never close.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self._binary,
                *args,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            raise SessionError(f"Cannot run {self._binary}: {exc}") from exc
        await process.wait()
        return process.returncode if process.returncode is not None else -1

    async def session_exists(self, session: str) -> bool:
        try:
            returncode, _, _ = await self._run("has-session", "-t", f"={session}")
        except SessionError:
            return False
        return returncode == 0

    async def window_exists(self, target: str) -> bool:
        try:
            session, window = split_target(target)
            returncode, stdout, _ = await self._run("list-windows", "-t", f"={session}", "-F", "#{window_name}")
        except (ValueError, SessionError) as exc:
            logger.debug("Window lookup for {} failed: {}", target, exc)
            return False
        return returncode == 0 and window in stdout.splitlines()

    async def create_window(self, session: str, window_name: str, working_dir: str) -> None:
        target = f"{session}:{window_name}"

        if not await self.session_exists(session):
            # First task of the project: the session starts with this window
            returncode = await self._spawn("new-session", "-d", "-s", session, "-n", window_name, "-c", working_dir)
            if returncode == 0:
                logger.info("Created tmux session {} with window {}", session, window_name)
                return
            # Another task of the project may have created the session meanwhile
            if not await self.session_exists(session):
                msg = f"Failed to create tmux session {session} (exit {returncode})"
                logger.error(msg)
                raise SessionError(msg)
            logger.debug("Session {} appeared concurrently, adding window", session)

        if await self.window_exists(target):
            logger.info("Window {} exists, skipping creation", target)
            return

        returncode, _, stderr = await self._run("new-window", "-d", "-t", f"{session}:", "-n", window_name, "-c", working_dir)
        if returncode != 0:
            msg = f"Failed to create window {target}: {stderr or f'exit {returncode}'}"
            logger.error(msg)
            raise SessionError(msg)
        logger.info("Created window {} in {}", target, working_dir)

    async def kill_window(self, target: str) -> None:
        try:
            pinned = exact_target(target)
        except ValueError as exc:
            raise SessionError(str(exc)) from exc
        returncode, _, stderr = await self._run("kill-window", "-t", pinned)
        if returncode == 0:
            logger.info("Killed window {}", target)
            return
        if is_missing_target(stderr):
            logger.debug("Window {} already gone: {}", target, stderr)
            return
        msg = f"Failed to kill window {target}: {stderr or f'exit {returncode}'}"
        logger.error(msg)
        raise SessionError(msg)

    async def send_keys(self, target: str, text: str) -> None:
        if not await self.window_exists(target):
            raise WindowMissingError(f"Window {target} does not exist")

        pinned = exact_target(target)
        # -l sends the text literally; Enter goes separately so TUIs see a submit
        returncode, _, stderr = await self._run("send-keys", "-t", pinned, "-l", text)
        if returncode != 0:
            error_cls = WindowMissingError if is_missing_target(stderr) else SessionError
            msg = f"Failed to send text to {target}: {stderr or f'exit {returncode}'}"
            logger.error(msg)
            raise error_cls(msg)

        await asyncio.sleep(self._enter_delay)

        returncode, _, stderr = await self._run("send-keys", "-t", pinned, "Enter")
        if returncode != 0:
            msg = f"Failed to send Enter to {target}: {stderr or f'exit {returncode}'}"
            logger.error(msg)
            raise SessionError(msg)
        logger.debug("Sent {} chars to {}", len(text), target)
