#!/usr/bin/env python3
'''
Commands to compress and uncompress ADC waveforms held in numpy files.
'''

import click
import numpy
from pathlib import Path

from lardataobj.util.cli import context, log, config_file
from lardataobj.util.codec import json_dumps
from lardataobj.rawdata import raw
from lardataobj.rawdata.config import CodecConfig

mode_names = [m.label() for m in raw.Compress]


@context("rawdata")
def cli(ctx):
    '''
    lardataobj raw data commands
    '''
    pass


def load_frame(filename):
    '''
    Return the waveforms of a .npy or .npz file as a 2D array.

    From a .npz file the first array is used.
    '''
    path = Path(filename)
    if path.suffix == ".npz":
        with numpy.load(path) as fp:
            keys = list(fp.keys())
            if not keys:
                raise click.BadParameter(f'no arrays in {filename}')
            arr = fp[keys[0]]
    elif path.suffix == ".npy":
        arr = numpy.load(path)
    else:
        raise click.BadParameter(f'unsupported file type: {filename}')
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2:
        raise click.BadParameter(f'expect 1D or 2D waveform array, got shape {arr.shape}')
    return arr.astype(numpy.int16)


def load_encoded(filename):
    '''
    Return the encoded waveforms and the codec config of a compress output.
    '''
    with numpy.load(filename) as fp:
        for key in ("adc", "offsets", "nsamples", "mode"):
            if key not in fp:
                raise click.BadParameter(f'not a compressed waveform file, no "{key}": {filename}')
        adc = fp["adc"]
        offsets = fp["offsets"]
        nsamples = fp["nsamples"]
        cfg = CodecConfig(mode=str(fp["mode"]))
        if "pedestal" in fp:
            pedestal = int(fp["pedestal"])
            cfg.pedestal = None if pedestal < 0 else pedestal
    encoded = [adc[a:b] for a, b in zip(offsets[:-1], offsets[1:])]
    return encoded, nsamples, cfg


@cli.command("compress")
@click.option("-m", "--mode", default=None, type=click.Choice(mode_names),
              help="Compression mode [default=huffman]")
@click.option("-t", "--threshold", default=None, type=int,
              help="Zero suppression threshold [default=5]")
@click.option("-n", "--nearest-neighbor", default=None, type=int,
              help="Zero suppression block merging distance in ticks [default=none]")
@click.option("-p", "--pedestal", default=None, type=int,
              help="Pedestal for zero suppression [default=none]")
@click.option("--sticky-code", default=None, is_flag=True,
              help="Ignore sticky ADC codes near the pedestal")
@click.option("-N", "--neighbor-channels", default=None, type=int,
              help="Keep ticks with signal in channels this close [default=0]")
@config_file("lardataobj", section="codec", defaults=CodecConfig().to_dict())
@click.option("-o", "--output", required=True, help="Output .npz file")
@click.argument("waveforms")
def cmd_compress(mode, threshold, nearest_neighbor, pedestal, sticky_code,
                 neighbor_channels, config, output, waveforms):
    '''
    Compress the waveforms of a .npy or .npz file.

    The array is indexed by (channel, tick) or is a single waveform.
    '''
    cfg = CodecConfig.from_dict(dict(
        mode=mode, threshold=threshold, nearest_neighbor=nearest_neighbor,
        pedestal=pedestal, sticky_code=sticky_code,
        neighbor_channels=neighbor_channels))
    try:
        compression = cfg.compression()
    except raw.UnsupportedCompression as err:
        raise click.BadParameter(str(err))

    frame = load_frame(waveforms)
    encoded = raw.compress_frame(frame, compression, **cfg.compress_kwds())

    sizes = [len(e) for e in encoded]
    offsets = numpy.concatenate([[0], numpy.cumsum(sizes)]).astype(numpy.int64)
    adc = numpy.concatenate(encoded) if encoded else numpy.zeros(0, dtype=numpy.int16)
    numpy.savez(output, adc=adc, offsets=offsets,
                nsamples=numpy.full(len(encoded), frame.shape[1], dtype=numpy.int64),
                mode=numpy.array(compression.label()),
                pedestal=numpy.array(-1 if cfg.pedestal is None else cfg.pedestal))
    log.info(f'{compression.label()}: {frame.size} samples in {len(encoded)} channels '
             f'-> {adc.size} words ({adc.size/max(frame.size, 1):.3f})')


@cli.command("uncompress")
@click.option("-o", "--output", required=True, help="Output .npy file")
@click.argument("compressed")
def cmd_uncompress(output, compressed):
    '''
    Uncompress waveforms made by the "compress" command.
    '''
    encoded, nsamples, cfg = load_encoded(compressed)
    frame = raw.uncompress_frame(encoded, cfg.compression(),
                                 nsamples=nsamples, pedestal=cfg.pedestal)
    numpy.save(output, frame)
    log.info(f'{cfg.mode}: {len(encoded)} channels of {frame.shape[1] if frame.size else 0} ticks')


@cli.command("info")
@click.argument("compressed")
def cmd_info(compressed):
    '''
    Print a JSON summary of waveforms made by the "compress" command.
    '''
    encoded, nsamples, cfg = load_encoded(compressed)
    nwords = sum(len(e) for e in encoded)
    nticks = int(numpy.sum(nsamples))
    summary = dict(
        mode=cfg.mode,
        pedestal=cfg.pedestal,
        nchannels=len(encoded),
        nsamples=nticks,
        nwords=nwords,
        ratio=nwords/nticks if nticks else 0.0,
    )
    click.echo(json_dumps(summary, indent=4))


def main():
    cli(obj=dict())

if '__main__' == __name__:
    main()
