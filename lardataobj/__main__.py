#!/usr/bin/env python

import click
from importlib import import_module

subs = "rawdata recobase"

from lardataobj.util.cli import log


@click.group()
def cli():
    """Main lardataobj"""

for sub in subs.split():
    try:
        mod = import_module(f'lardataobj.{sub}.__main__')
    except ModuleNotFoundError as err:
        log.warning(f'no cli for module: {sub}: {err}')
        continue
    cli.add_command(mod.cli)


def main():
    cli(obj=dict())

if '__main__' == __name__:
    main()
