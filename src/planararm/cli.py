"""
Command-line interface for PlanarArm.

Provides commands to inspect arm configurations and to drive a simulated
arm: reach a point, move a single joint, or operate the claw.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from planararm import __version__
from planararm.arm import RobotArm
from planararm.core.angles import heading
from planararm.core.config import ArmConfig, ConfigManager, default_arm_config
from planararm.core.exceptions import PlanarArmError
from planararm.core.logging import configure_logging
from planararm.kinematics.ccd import Outcome
from planararm.kinematics.chain import KinematicsChain
from planararm.simulation.environment import SimulationEnvironment

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Configuration directory (uses the built-in arm when omitted)",
)
@click.option("--arm", "arm_name", default="default", help="Arm configuration name")
@click.option("--log-level", default="WARNING", help="Log level")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log lines to this file",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: Optional[Path],
    arm_name: str,
    log_level: str,
    json_logs: bool,
    log_file: Optional[Path],
) -> None:
    """PlanarArm - constrained CCD inverse kinematics for planar arms."""
    configure_logging(level=log_level, json_output=json_logs, log_file=log_file)
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["arm_name"] = arm_name


def _load_arm_config(ctx: click.Context) -> ArmConfig:
    config_dir = ctx.obj["config_dir"]
    if config_dir is None:
        if ctx.obj["arm_name"] != "default":
            raise click.UsageError("--arm requires --config-dir")
        return default_arm_config()
    return ConfigManager(config_dir).get_arm(ctx.obj["arm_name"])


def _start_arm(ctx: click.Context) -> tuple[RobotArm, SimulationEnvironment]:
    arm = RobotArm.from_config(_load_arm_config(ctx))
    env = SimulationEnvironment()
    env.start()
    env.add_arm(arm)
    return arm, env


def _print_chain(chain: KinematicsChain, title: str) -> None:
    table = Table(title=title)
    table.add_column("Joint", style="cyan")
    table.add_column("Angle (deg)", justify="right")
    table.add_column("Range")
    table.add_column("Position")
    for joint in chain.joints:
        x, y = joint.position
        table.add_row(
            joint.id,
            f"{joint.orientation_degrees:.2f}",
            "free" if joint.range.is_unrestricted else f"{joint.range.min_angle:g}..{joint.range.max_angle:g}",
            f"({x:.3f}, {y:.3f})",
        )
    console.print(table)
    end_bone = chain.end_bone
    ex, ey = end_bone.end
    end_heading = heading(end_bone.end - end_bone.start)
    console.print(f"  End effector: ({ex:.3f}, {ey:.3f}), heading {end_heading:.1f}°")


# =============================================================================
# Configuration Commands
# =============================================================================


@main.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("list")
@click.pass_context
def config_list(ctx: click.Context) -> None:
    """List available arm configurations."""
    config_dir = ctx.obj["config_dir"]
    try:
        names = ConfigManager(config_dir).list_arms() if config_dir else ["default"]
    except PlanarArmError as e:
        console.print(f"[red]✗[/red] Failed to list arms: {e}")
        raise SystemExit(1)

    if not names:
        console.print("[yellow]No arm configurations found.[/yellow]")
        return

    table = Table(title="Available Arms")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the selected arm configuration."""
    try:
        arm_config = _load_arm_config(ctx)
    except PlanarArmError as e:
        console.print(f"[red]✗[/red] Failed to load arm: {e}")
        raise SystemExit(1)

    table = Table(title=f"Arm: {arm_config.name}")
    table.add_column("Bone", style="cyan")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Length", justify="right")
    for bone in arm_config.bones:
        table.add_row(bone.id, bone.joint_a, bone.joint_b or "-", f"{bone.length:g}")
    if arm_config.gripper is not None:
        g = arm_config.gripper
        table.add_row(f"{g.id} (gripper)", g.joint_a, "-", f"{g.length:g}")
    console.print(table)
    console.print(f"  Base position: {tuple(arm_config.base_position)}")
    console.print(f"  Approach heading: {arm_config.constraints.approach_heading}")


# =============================================================================
# Motion Commands
# =============================================================================


@main.command("reach")
@click.argument("x", type=float)
@click.argument("y", type=float)
@click.option("--timeout", default=120.0, show_default=True, help="Simulated seconds to wait")
@click.pass_context
def reach(ctx: click.Context, x: float, y: float, timeout: float) -> None:
    """Solve for point (X, Y) and move the simulated arm there."""
    try:
        arm, env = _start_arm(ctx)
    except PlanarArmError as e:
        console.print(f"[red]✗[/red] Failed to build arm: {e}")
        raise SystemExit(1)

    outcomes: list[Outcome] = []
    arm.move_arm((x, y), lambda outcome, chain: outcomes.append(outcome))
    idle = env.run_until_idle(arm, max_seconds=timeout)

    if not outcomes or outcomes[0] is not Outcome.SUCCESS:
        console.print(f"[red]✗[/red] No solution for ({x:g}, {y:g})")
        raise SystemExit(1)
    if not idle:
        console.print(f"[yellow]⚠[/yellow] Arm still moving after {timeout:g}s")
        raise SystemExit(1)

    console.print(f"[green]✓[/green] Reached ({x:g}, {y:g}) in {env.elapsed:.2f}s simulated")
    _print_chain(arm.chain, "Final pose")


@main.command("joint")
@click.argument("joint_id")
@click.argument("angle", type=float)
@click.option("--timeout", default=120.0, show_default=True, help="Simulated seconds to wait")
@click.pass_context
def joint(ctx: click.Context, joint_id: str, angle: float, timeout: float) -> None:
    """Move a single joint to ANGLE degrees."""
    try:
        arm, env = _start_arm(ctx)
        accepted = arm.move_joint(joint_id, angle)
    except PlanarArmError as e:
        console.print(f"[red]✗[/red] {e}")
        raise SystemExit(1)

    if not accepted:
        console.print(f"[red]✗[/red] {angle:g}° is outside the range of {joint_id}")
        raise SystemExit(1)

    if not env.run_until_idle(arm, max_seconds=timeout):
        console.print(f"[yellow]⚠[/yellow] {joint_id} still moving after {timeout:g}s")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Moved {joint_id} to {angle:g}°")
    _print_chain(arm.chain, "Final pose")


@main.command("claw")
@click.argument("open_percentage", type=click.FloatRange(0.0, 1.0))
@click.pass_context
def claw(ctx: click.Context, open_percentage: float) -> None:
    """Open the claw to OPEN_PERCENTAGE (0 = closed, 1 = open)."""
    try:
        arm, env = _start_arm(ctx)
    except PlanarArmError as e:
        console.print(f"[red]✗[/red] Failed to build arm: {e}")
        raise SystemExit(1)

    if not arm.set_claw(open_percentage):
        console.print("[red]✗[/red] Arm has no gripper")
        raise SystemExit(1)

    gripper = arm.gripper
    arm.tick(env.time_step)
    while arm.is_claw_moving:
        env.tick(env.time_step)
        arm.tick(env.time_step)
    console.print(
        f"[green]✓[/green] Claw open at {gripper.open_percentage:.0%} (gap {gripper.claw_gap:.3f})"
    )


if __name__ == "__main__":
    main()
