#!/usr/bin/env python
'''
Configuration of waveform compression.
'''

import dataclasses

from lardataobj.util.codec import dataclass_dictify
from .raw import Compress, default_threshold


@dataclass_dictify
@dataclasses.dataclass
class CodecConfig:
    '''
    Parameters of the waveform codec.
    '''

    mode: str = "huffman"
    '''
    The compression mode name or number, see raw.Compress.
    '''

    threshold: int = default_threshold
    '''
    Zero suppression threshold in ADC counts.
    '''

    nearest_neighbor: int | None = None
    '''
    Zero suppression keeps this many ticks around signal and merges
    blocks which are this close.  None for plain zero suppression.
    '''

    pedestal: int | None = None
    '''
    Pedestal subtracted before zero suppression and restored after.
    '''

    sticky_code: bool = False
    '''
    Ignore ADC codes stuck near the pedestal.
    '''

    neighbor_channels: int = 0
    '''
    Zero suppression keeps ticks with signal in channels this close.
    '''

    def compression(self):
        return Compress.parse(self.mode)

    def compress_kwds(self):
        '''
        Return keyword arguments for raw.compress_frame().
        '''
        return dict(threshold=self.threshold,
                    nearest_neighbor=self.nearest_neighbor,
                    pedestal=self.pedestal,
                    sticky_code=self.sticky_code,
                    neighbor_channels=self.neighbor_channels)
