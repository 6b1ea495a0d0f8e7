"""
Command line entry point.

Usage:
    particle-pusher params.yaml [--mode NAME] [--steps N] [--static] [--quiet]
"""

import argparse
import sys

from particle_pusher.config import load_parameters
from particle_pusher.core.fields import FieldSequence, StaticFields
from particle_pusher.transport.driver import ParticleDriver
from particle_pusher.transport.scenario import create_scenario


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='particle-pusher',
        description='Trace test particles through precomputed plasma fields.')
    parser.add_argument('config', help='YAML parameter file')
    parser.add_argument('--mode', help='Scenario name (overrides the parameter file)')
    parser.add_argument('--steps', type=int, default=None,
                        help='Number of push steps (default: (end_time - start_time) / dt)')
    parser.add_argument('--static', action='store_true',
                        help='Run without input files (zero fields)')
    parser.add_argument('--output-dir', default='.', help='Directory for output files')
    parser.add_argument('--quiet', action='store_true', help='No progress bar or summary')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    params = load_parameters(args.config)
    if args.mode:
        params.mode = args.mode

    try:
        scenario = create_scenario(params.mode, params, output_dir=args.output_dir)
    except ValueError as e:
        print(f"Error: {e} Aborting.", file=sys.stderr)
        sys.exit(1)

    if args.static:
        fields = StaticFields()
    else:
        fields = FieldSequence(params.input_filename_pattern, params.input_dt)

    driver = ParticleDriver(scenario, fields, params)
    driver.run(num_steps=args.steps, verbose=not args.quiet)
    return 0


if __name__ == "__main__":
    sys.exit(main())
