import argparse
import json

from ring_escape.core.config import ParticleStyle
from ring_escape.presets.modes import MODE_PRESETS


def build_parser():
    parser = argparse.ArgumentParser(description='Headless ring-escape simulation')
    parser.add_argument('--exp_name', type=str, default='', metavar='N',
                        help='experiment_name')
    parser.add_argument('--seed', type=int, default=None, metavar='N',
                        help='random seed (default: preset seed, else 1)')
    parser.add_argument('--mode', type=str, default=None, choices=sorted(MODE_PRESETS),
                        help='game mode preset (default: collapsing_rotating_circles)')
    parser.add_argument('--preset', type=str, default=None, metavar='PATH',
                        help='YAML preset file; command line options override it')
    parser.add_argument('--frames', type=int, default=3600, metavar='N',
                        help='maximum number of frames to simulate (default: 3600)')
    parser.add_argument('--dt', type=float, default=1.0, metavar='N',
                        help='frame step in 60 Hz frame units (default: 1.0)')
    parser.add_argument('--linger', type=int, default=120, metavar='N',
                        help='frames to keep simulating after game over (default: 120)')
    parser.add_argument('--outdir', type=str, default='results', metavar='N',
                        help='directory to save the recording (default: results)')
    parser.add_argument('--log_level', type=str, default='INFO',
                        help='logging level (default: INFO)')
    parser.add_argument('--log_file', type=str, default=None,
                        help='optional log file')
    parser.add_argument('--record_particles', action='store_true',
                        help='keep particles in the recorded frames')
    parser.add_argument('--no_plot', action='store_true',
                        help='skip the PNG of the final state')
    parser.add_argument(
        '--config',
        type=json.loads,
        default=None,
        help=(
            "JSON dict of extra SimConfig overrides, "
            'e.g. \'{"shrink_factor": 0.7, "balls_on_destroy": 1}\''
        ),
    )

    # most common engine options; everything else goes through --config
    parser.add_argument('--gravity', type=float, default=None,
                        help='downward gravity per frame')
    parser.add_argument('--bounciness', type=float, default=None,
                        help='restitution for walls and rings')
    parser.add_argument('--ball_count', type=int, default=None,
                        help='number of balls at start')
    parser.add_argument('--ring_count', type=int, default=None,
                        help='number of rings at start')
    parser.add_argument('--gate_width_degrees', type=float, default=None,
                        help='exit gate width in degrees')
    parser.add_argument('--rotation_speed', type=float, default=None,
                        help='ring rotation speed in radians per frame')
    parser.add_argument('--shrink_factor', type=float, default=None,
                        help='per-destruction ring shrink factor')
    parser.add_argument('--balls_on_destroy', type=int, default=None,
                        help='balls released when a ring is destroyed')
    parser.add_argument('--particle_style', type=str, default=None,
                        choices=[s.value for s in ParticleStyle],
                        help='particle burst style')
    parser.add_argument('--shrink_on_destroy', action=argparse.BooleanOptionalAction, default=None,
                        help='shrink the remaining rings after each destruction')
    parser.add_argument('--effects_enabled', action=argparse.BooleanOptionalAction, default=None,
                        help='spawn particle bursts')
    return parser

'''
usage: python scripts/main.py --exp_name demo --seed 42 --mode collapsing_rotating_circles \
    --frames 3600 --particle_style confetti --config '{"balls_on_destroy": 1}'
'''
