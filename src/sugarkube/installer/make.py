"""Install kapps with make."""

from __future__ import annotations

from pathlib import Path

from ..config import StackConfig
from ..errors import AmbiguousBuildFileError, ConfigError, NotFoundError
from ..kapp import Kapp
from ..shared.logging import get_logger
from ..shared.process import format_command, run_command
from .base import Installer
from .parameterisers import Parameteriser, find_files, identify_kapp_interfaces

logger = get_logger(__name__)

MAKE_PATH = "make"
MAKE_INSTALLER_NAME = "make"
MAKEFILE = "Makefile"


def find_makefile(kapp: Kapp, kapp_root: Path) -> Path:
    """Locate the Makefile to run for a kapp.

    If the kapp selects a Makefile, that one is used. Otherwise exactly one
    Makefile must exist under the kapp root.

    Raises:
        NotFoundError: If there's no Makefile (or the selected one is missing).
        AmbiguousBuildFileError: If several exist and none is selected.
    """
    if kapp.makefile:
        selected = kapp_root / kapp.makefile
        if not selected.is_file():
            raise NotFoundError(
                message=f"Selected Makefile '{kapp.makefile}' not found for kapp '{kapp.id}' "
                f"in '{kapp_root}'"
            )
        return selected.resolve()

    makefiles = find_files(kapp_root, MAKEFILE)
    if not makefiles:
        raise NotFoundError(message=f"No Makefile found for kapp '{kapp.id}' in '{kapp_root}'")
    if len(makefiles) > 1:
        candidates = [str(p.relative_to(kapp_root)) for p in makefiles]
        raise AmbiguousBuildFileError(
            message=f"Multiple Makefiles found for kapp '{kapp.id}': {', '.join(candidates)}",
            hint="Select one with a 'makefile' key on the kapp in its manifest.",
            candidates=candidates,
        )
    return makefiles[0].resolve()


def build_env(
    kapp: Kapp,
    kapp_root: Path,
    stack_config: StackConfig,
    approved: bool,
    installer_vars: dict,
    values: dict,
    parameterisers: list[Parameteriser],
) -> dict[str, str]:
    """Compose the environment for a kapp's build tool.

    The fixed keys come first, then provider installer vars (upper-cased),
    then each parameteriser's vars in detection order. Later keys win.
    """
    env = {
        "KAPP_ROOT": str(kapp_root.resolve()),
        "APPROVED": str(approved).lower(),
        "CLUSTER": stack_config.cluster,
        "PROFILE": stack_config.profile,
        "PROVIDER": stack_config.provider,
    }

    # Provider-specific vars, e.g. the aws provider adds REGION
    for key, value in installer_vars.items():
        env[str(key).upper()] = str(value)

    # Adds things like KUBE_CONTEXT, NAMESPACE, RELEASE
    for parameteriser in parameterisers:
        env.update(parameteriser.get_env_vars(kapp, values))

    return env


def build_cli_args(
    target: str,
    kapp_root: Path,
    stack_config: StackConfig,
    parameterisers: list[Parameteriser],
) -> list[str]:
    """The build target followed by any parameteriser arguments."""
    valid_pattern_matches = [stack_config.cluster, stack_config.profile, stack_config.provider]

    args = [target]
    for parameteriser in parameterisers:
        arg = parameteriser.get_cli_arg(kapp_root, valid_pattern_matches)
        if arg:
            args.append(arg)
    return args


class MakeInstaller(Installer):
    """Runs a kapp's Makefile targets."""

    name = MAKE_INSTALLER_NAME

    def run(
        self, target: str, kapp: Kapp, stack_config: StackConfig, approved: bool, dry_run: bool
    ) -> None:
        if kapp.root_dir is None:
            raise ConfigError(message=f"Kapp '{kapp.id}' hasn't been acquired yet")
        kapp_root = Path(kapp.root_dir)

        makefile = find_makefile(kapp, kapp_root)
        parameterisers = identify_kapp_interfaces(kapp_root)
        logger.debug(
            "Identified kapp interfaces", kapp=kapp.id, interfaces=[p.name for p in parameterisers]
        )

        env = build_env(
            kapp,
            kapp_root,
            stack_config,
            approved,
            self.provider.installer_vars(),
            self.provider.vars(),
            parameterisers,
        )
        args = [MAKE_PATH] + build_cli_args(target, kapp_root, stack_config, parameterisers)
        cwd = makefile.parent

        if dry_run:
            logger.info(
                "Dry run. Would run kapp target",
                kapp=kapp.id,
                target=target,
                dir=str(cwd),
                command=format_command(args),
                env=env,
            )
            return

        logger.debug(
            "Running kapp target", kapp=kapp.id, dir=str(cwd), command=format_command(args)
        )
        logger.info(f"Running '{target}' for kapp '{kapp.id}'...")

        run_command(
            args,
            env=env,
            cwd=cwd,
            error_message=f"Error running '{target}' for kapp '{kapp.id}'",
        )
        logger.info(f"Kapp '{kapp.id}' {target} succeeded")
