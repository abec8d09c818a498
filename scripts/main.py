# scripts/main.py

from __future__ import annotations

from pathlib import Path
import logging

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ring_escape.core import SimConfig, SimStopPolicy, run_simulation
from ring_escape.presets import config_for_mode, make_world
from ring_escape.presets.modes import DEFAULT_MODE
from ring_escape.utils.cli import build_parser
from ring_escape.utils.logging_setup import setup_logging
from ring_escape.utils.preset_loader import load_preset

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_SEED = 1

logger = logging.getLogger("ring_escape.main")


def resolve_config(args) -> tuple[SimConfig, str, int]:
    """Mode preset <- YAML `config:` <- --config JSON <- explicit flags."""
    preset = load_preset(args.preset) if args.preset is not None else None
    if preset is not None:
        logger.info("Loaded preset %s (%d files)", preset.preset_path, len(preset.loaded_files))

    mode = args.mode or (preset.mode if preset is not None else None) or DEFAULT_MODE
    overrides = dict(preset.overrides) if preset is not None else {}
    overrides.update(args.config or {})
    config = SimConfig.from_args(args, base=config_for_mode(mode, overrides))

    seed = args.seed
    if seed is None and preset is not None:
        seed = preset.seed
    return config, mode, DEFAULT_SEED if seed is None else seed


def main():
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.log_level, log_file=args.log_file)

    config, mode, seed = resolve_config(args)
    world = make_world(config, seed=seed)

    policy = SimStopPolicy(n_steps=args.frames, linger_steps=args.linger)
    recording = run_simulation(
        world, args.frames, dt=args.dt,
        policy=policy,
        record_particles=args.record_particles,
    )
    recording.meta = {
        "sim_config": config.to_dict(),
        "mode": mode,
        "seed": seed,
        "dt": args.dt,
        "engine_version": "0.1.0",
    }

    exp_dir = PROJECT_ROOT / args.outdir / args.exp_name
    exp_dir.mkdir(exist_ok=True, parents=True)
    recording_path = exp_dir / "recording.pkl.xz"
    recording.save(recording_path)
    logger.info("Saved %d frames to %s", len(recording.frames), recording_path)

    final = recording.final_state
    if final is not None:
        logger.info(
            "Final: t=%.1f score=%d balls=%d rings_left=%d game_over=%s",
            final.time, final.score, final.n_balls, len(final.active_rings), final.game_over,
        )
    for name, count in sorted(recording.event_counts().items()):
        logger.info("  %-22s %d", name, count)

    if not args.no_plot:
        fig, _ = world.plot()
        png_path = exp_dir / "final_state.png"
        fig.savefig(png_path, dpi=150)
        plt.close(fig)
        logger.info("Saved final state plot to %s", png_path)


if __name__ == "__main__":
    main()
