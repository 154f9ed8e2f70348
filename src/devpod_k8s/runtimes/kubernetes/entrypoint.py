"""Container command resolution."""

from devpod_k8s.models import ImageDetails, MergedDevContainerConfig

KEEP_ALIVE = ["/bin/sh", "-c", "while sleep 1000 & wait $!; do :; done"]


def get_container_entrypoint_and_args(
    merged_config: MergedDevContainerConfig,
    image_details: ImageDetails,
) -> tuple[str, list[str]]:
    """Build the pod command for the dev container.

    The container runs a small shell wrapper that starts feature
    entrypoints and then execs the real command. The real command is the
    image's own entrypoint and cmd when the config sets
    ``overrideCommand: false``; otherwise a keep-alive loop.
    """
    cmd: list[str] = []
    if merged_config.override_command is False:
        cmd = [*image_details.config.entrypoint, *image_details.config.cmd]
    if not cmd:
        cmd = list(KEEP_ALIVE)

    script_lines = ["echo Container started", 'trap "exit 0" 15']
    script_lines.extend(merged_config.entrypoints)
    script_lines.append('exec "$@"')
    script = "\n".join(script_lines) + "\n"

    return "/bin/sh", ["-c", script, "-", *cmd]
