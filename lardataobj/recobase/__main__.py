#!/usr/bin/env python3
'''
Commands for reconstruction data objects.
'''

import click

from lardataobj.util.cli import context, log
from lardataobj.util.bitmask import BitMask
from lardataobj.recobase.trajectorypointflags import TrajectoryPointFlags


@context("recobase")
def cli(ctx):
    '''
    lardataobj reconstruction commands
    '''
    pass


def parse_int(text):
    try:
        return int(text, 0)
    except ValueError:
        raise click.BadParameter(f'not an integer: "{text}"')


def make_points(from_hit=None, defined=None, values=()):
    '''
    Return a list of trajectory point flags, one per integer of values
    giving the bits of the set flags.

    With no values, return a single default point.
    '''
    if not values:
        return [TrajectoryPointFlags(from_hit, TrajectoryPointFlags.default_flags_mask())]

    points = list()
    for bits in values:
        mask = BitMask.from_values(bits if defined is None else defined, bits,
                                   capacity=TrajectoryPointFlags.flag.MaxFlags)
        if mask.values != bits:
            log.warning(f'flags not defined or out of range are dropped from {bits:#x}')
        points.append(TrajectoryPointFlags(from_hit, mask))
    return points


@cli.command("dump-flags")
@click.option("--from-hit", default=None, type=int,
              help="Index of the original hit [default=none]")
@click.option("-d", "--defined", default=None, type=str,
              help="Bits of the defined flags [default=same as VALUES]")
@click.option("-v", "--verbosity", default=1, type=int,
              help="Verbosity level, 0 or 1 [default=1]")
@click.argument("values", nargs=-1)
def cmd_dump_flags(from_hit, defined, verbosity, values):
    '''
    Describe trajectory point flags given as bits of set flags.

    Each VALUES is an integer, eg 0x9 for HitIgnored and Merged.  With
    no VALUES, describe the flags of a default point.
    '''
    defined = None if defined is None else parse_int(defined)
    values = [parse_int(text) for text in values]
    for point in make_points(from_hit, defined, values):
        click.echo(point.dump(verbosity))


def main():
    cli(obj=dict())

if '__main__' == __name__:
    main()
