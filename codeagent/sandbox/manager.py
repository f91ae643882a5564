"""Docker-backed sandbox provisioning.

A sandbox is a container started from a template image. It publishes the
preview port on a random host port and runs a small watchdog that stops the
container once its idle deadline passes, so the timeout is enforced inside
the sandbox and survives this process exiting.
"""

import io
import posixpath
import tarfile
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import docker
from docker.errors import DockerException, NotFound
from docker.models.containers import Container

from codeagent.config import config
from codeagent.sandbox.errors import (
    CommandExitError,
    SandboxError,
    SandboxNotFoundError,
)
from codeagent.utils import logger, retry_with_backoff

SANDBOX_LABEL = "codeagent.sandbox"
DEADLINE_FILE = "/tmp/.codeagent-deadline"

# Stops PID 1 (docker-init) once the deadline written by set_timeout passes.
WATCHDOG_SCRIPT = (
    "while :; do "
    f'd=$(cat {DEADLINE_FILE} 2>/dev/null || echo 0); '
    'if [ "$d" -gt 0 ] && [ "$(date +%s)" -ge "$d" ]; then kill -TERM 1; exit 0; fi; '
    "sleep 5; "
    "done"
)


@dataclass
class CommandResult:
    """Result of a command run inside a sandbox."""

    exit_code: int
    stdout: str
    stderr: str


class SandboxFiles:
    """File access inside a sandbox."""

    def __init__(self, sandbox: "Sandbox"):
        self._sandbox = sandbox

    def read(self, path: str) -> str:
        """Read a text file from the sandbox."""
        abs_path = self._sandbox.resolve_path(path)
        try:
            bits, _ = self._sandbox.container.get_archive(abs_path)
        except NotFound as e:
            raise SandboxError(f"File not found: {path}") from e

        buffer = io.BytesIO(b"".join(bits))
        with tarfile.open(fileobj=buffer, mode="r") as tar:
            member = tar.next()
            if member is None or not member.isfile():
                raise SandboxError(f"Path is not a file: {path}")
            extracted = tar.extractfile(member)
            data = extracted.read() if extracted else b""

        return data.decode("utf-8", errors="replace")

    def write(self, path: str, content: str) -> None:
        """Write a text file into the sandbox, creating parent directories."""
        abs_path = self._sandbox.resolve_path(path)
        data = content.encode("utf-8")

        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            info = tarfile.TarInfo(name=abs_path.lstrip("/"))
            info.size = len(data)
            info.mtime = int(time.time())
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))

        if not self._sandbox.container.put_archive("/", buffer.getvalue()):
            raise SandboxError(f"Failed to write file: {path}")

        logger.debug(f"Wrote {len(data)} bytes to {abs_path}")


class SandboxCommands:
    """Command execution inside a sandbox."""

    def __init__(self, sandbox: "Sandbox"):
        self._sandbox = sandbox

    def run(
        self,
        command: str,
        workdir: Optional[str] = None,
        environment: Optional[Dict[str, str]] = None,
    ) -> CommandResult:
        """
        Run a shell command and wait for it to finish.

        Raises:
            CommandExitError: If the command exits with a non-zero code
        """
        logger.debug(f"Executing in sandbox: {command}")

        exec_result = self._sandbox.container.exec_run(
            ["sh", "-c", command],
            workdir=workdir or self._sandbox.workdir,
            environment=environment,
            demux=True,
            tty=False,
        )

        stdout_bytes, stderr_bytes = exec_result.output or (None, None)
        result = CommandResult(
            exit_code=exec_result.exit_code,
            stdout=(stdout_bytes or b"").decode("utf-8", errors="replace"),
            stderr=(stderr_bytes or b"").decode("utf-8", errors="replace"),
        )

        if result.exit_code != 0:
            raise CommandExitError(
                command, result.exit_code, result.stdout, result.stderr
            )

        return result


class Sandbox:
    """Handle to a running sandbox, addressed by its container id."""

    def __init__(
        self,
        container: Container,
        workdir: Optional[str] = None,
        public_host: Optional[str] = None,
    ):
        self.container = container
        self.workdir = workdir or config.sandbox_workdir
        self.public_host = public_host or config.sandbox_public_host
        self.files = SandboxFiles(self)
        self.commands = SandboxCommands(self)

    @property
    def sandbox_id(self) -> str:
        return self.container.id

    def resolve_path(self, path: str) -> str:
        """Resolve a sandbox path against the working directory."""
        if not posixpath.isabs(path):
            path = posixpath.join(self.workdir, path)
        return posixpath.normpath(path)

    def set_timeout(self, seconds: int) -> None:
        """(Re)arm the idle deadline enforced by the in-sandbox watchdog."""
        deadline = int(time.time()) + seconds
        self.files.write(DEADLINE_FILE, f"{deadline}\n")
        logger.debug(f"Sandbox {self.sandbox_id[:12]} timeout set to {seconds}s")

    def start_watchdog(self) -> None:
        self.container.exec_run(["sh", "-c", WATCHDOG_SCRIPT], detach=True)

    def get_host(self, port: int) -> str:
        """Return the ``host:port`` the given sandbox port is published on."""
        self.container.reload()
        ports = self.container.attrs.get("NetworkSettings", {}).get("Ports") or {}
        bindings = ports.get(f"{port}/tcp")
        if not bindings:
            raise SandboxError(f"Port {port} is not published by sandbox {self.sandbox_id[:12]}")
        return f"{self.public_host}:{bindings[0]['HostPort']}"

    def get_url(self, port: Optional[int] = None) -> str:
        return f"http://{self.get_host(port or config.sandbox_port)}"


class SandboxManager:
    """Creates and reconnects to sandbox containers."""

    def __init__(self, client: Optional[docker.DockerClient] = None):
        """Initialize sandbox manager."""
        self.client = client

    def connect_daemon(self) -> docker.DockerClient:
        """Connect to Docker daemon."""
        if self.client is None:
            try:
                self.client = docker.from_env()
                logger.info("Connected to Docker daemon")
            except DockerException as e:
                logger.error(f"Failed to connect to Docker: {e}")
                raise SandboxError(f"Docker daemon unavailable: {e}") from e
        return self.client

    @retry_with_backoff(max_retries=2, exceptions=(DockerException,))
    def _start_container(self, template: str) -> Container:
        client = self.connect_daemon()
        name = f"sandbox-{uuid.uuid4().hex[:8]}"

        options: Dict[str, Any] = {}
        if config.sandbox_memory_limit:
            options["mem_limit"] = config.sandbox_memory_limit

        return client.containers.run(
            template,
            detach=True,
            tty=True,
            stdin_open=True,
            init=True,
            name=name,
            hostname="sandbox",
            ports={f"{config.sandbox_port}/tcp": None},
            labels={SANDBOX_LABEL: "true", f"{SANDBOX_LABEL}.template": template},
            security_opt=["no-new-privileges:true"],
            working_dir=config.sandbox_workdir,
            **options,
        )

    async def create(self, template: Optional[str] = None) -> Sandbox:
        """
        Create a new sandbox from a template image.

        Args:
            template: Image name (default: from config)

        Returns:
            Sandbox handle
        """
        template = template or config.sandbox_template
        logger.debug(f"Creating sandbox from template {template}")

        try:
            container = self._start_container(template)
        except DockerException as e:
            logger.error(f"Failed to create sandbox: {e}")
            raise SandboxError(f"Failed to create sandbox from {template}: {e}") from e

        sandbox = Sandbox(container)
        sandbox.start_watchdog()
        logger.info(f"Sandbox created: {sandbox.sandbox_id[:12]}")

        return sandbox

    async def connect(self, sandbox_id: str) -> Sandbox:
        """Reattach to an existing sandbox by id, restarting it if stopped."""
        client = self.connect_daemon()

        try:
            container = client.containers.get(sandbox_id)
        except NotFound as e:
            raise SandboxNotFoundError(f"Sandbox not found: {sandbox_id}") from e

        sandbox = Sandbox(container)
        if container.status != "running":
            logger.info(f"Restarting sandbox {sandbox_id[:12]} ({container.status})")
            container.start()
            # The expired deadline survives a restart.
            sandbox.set_timeout(config.sandbox_timeout)
            sandbox.start_watchdog()

        return sandbox

    async def kill(self, sandbox_id: str) -> None:
        """Remove a sandbox immediately."""
        client = self.connect_daemon()

        try:
            client.containers.get(sandbox_id).remove(force=True)
            logger.info(f"Sandbox removed: {sandbox_id[:12]}")
        except NotFound as e:
            raise SandboxNotFoundError(f"Sandbox not found: {sandbox_id}") from e

    def list_sandboxes(self) -> list[Container]:
        """List sandbox containers known to the daemon."""
        client = self.connect_daemon()
        return client.containers.list(all=True, filters={"label": SANDBOX_LABEL})
