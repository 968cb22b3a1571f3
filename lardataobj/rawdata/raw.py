#!/usr/bin/env python
'''
Compression of ADC waveforms.

A waveform is a 1D sequence of signed 16 bit ADC samples, one per
tick.  The functions here return new numpy.int16 arrays.  The encoded
forms are themselves sequences of 16 bit words.

Zero suppression
----------------

Only the blocks of ticks with a significant signal are kept:

    [N, B, begin_0, ..., begin_B-1, size_0, ..., size_B-1, samples...]

N is the original number of ticks, B the number of blocks, followed by
the first tick and the number of ticks of each block and finally the
samples of all blocks, concatenated.  Decoding fills the ticks out of
the blocks with zero, or with a pedestal.

Huffman
-------

The first word is the first sample.  The following samples are coded
as the difference from the previous one:

    4 times no change   1
    no change           01
    +1                  001
    -1                  0001
    +2                  00001
    -2                  000001
    +3                  0000001
    -3                  00000001

Codes are packed from bit 14 downward into words which have bit 15
set.  A difference larger than 3 is stored instead as the sample value
in a word with bit 15 clear, bit 14 marking a negative value.  Sample
magnitudes must then fit in 14 bits.

Fibonacci
---------

    [N, first sample, packed bits...]

Each difference d is mapped to a positive integer (2d if d > 0, else
-2d+1) which is written as a sum of non-consecutive Fibonacci numbers,
least significant first, and terminated by an extra 1 bit.  The bit
stream is packed 16 bits per word, starting from the least significant
bit.
'''

import enum
import logging
from collections import deque

import numpy

log = logging.getLogger("lardataobj.rawdata")

default_threshold = 5

# The sticky code feature of some ADCs gets stuck on codes with the six
# least significant bits all 0 or all 1.
sticky_mask = 0x3f
sticky_range = 64

# The sample count is stored in a 16 bit word.
max_samples = 32767

coded_bit = 0x8000
sign_bit = 0x4000
max_literal = 0x3fff

huffman_code_lengths = {0: 2, 1: 3, -1: 4, 2: 5, -2: 6, 3: 7, -3: 8}
huffman_zero_run = 4
huffman_deltas = {1: 0, 2: 1, 3: -1, 4: 2, 5: -2, 6: 3, 7: -3}


class UnsupportedCompression(ValueError):
    '''
    The compression mode is unknown or can not be applied.
    '''
    pass


class Compress(enum.IntEnum):
    '''
    Compression applied to a waveform.
    '''
    NONE = 0
    HUFFMAN = 1
    ZERO_SUPPRESSION = 2
    ZERO_HUFFMAN = 3
    DYNAMIC_DEC = 4
    FIBONACCI = 5
    SEQUENCE = 6

    @classmethod
    def parse(cls, value):
        '''
        Return the mode from a member, an integer or a name.

        Names are case insensitive and may use "-" for "_".
        '''
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            if key in cls.__members__:
                return cls[key]
            try:
                value = int(key)
            except ValueError:
                raise UnsupportedCompression(f'unknown compression: "{value}"') from None
        try:
            return cls(int(value))
        except ValueError:
            raise UnsupportedCompression(f'unknown compression #{value}') from None

    def label(self):
        return self.name.lower().replace("_", "-")


def wrap16(value):
    '''
    Return value wrapped to the range of a signed 16 bit word.
    '''
    return ((int(value) + 0x8000) & 0xFFFF) - 0x8000


def as_adc(adc):
    '''
    Return the samples as a flat numpy.int16 array.
    '''
    return numpy.asarray(adc, dtype=numpy.int16).ravel()


def to_words(values):
    '''
    Return a numpy.int16 array from integers holding 16 bit words.
    '''
    return numpy.array([wrap16(v) for v in values], dtype=numpy.int16)


def check_nsamples(nticks):
    if nticks > max_samples:
        raise ValueError(f'can not encode {nticks} samples, at most {max_samples} fit the header')


def adc_sticky_code_check(value, pedestal, sticky_code):
    '''
    Return the distance of value from the pedestal.

    With sticky_code, a value whose six least significant bits are all
    0 or all 1 and which is within 64 counts of the pedestal counts as
    no signal.
    '''
    value = int(value)
    distance = abs(value - int(pedestal))
    if not sticky_code:
        return distance
    low = value & sticky_mask
    if low in (0, sticky_mask) and distance < sticky_range:
        return 0
    return distance


def sticky_code_values(adc, pedestal, sticky_code):
    '''
    Array version of adc_sticky_code_check().
    '''
    adc = numpy.asarray(adc, dtype=numpy.int32)
    distance = numpy.abs(adc - int(pedestal))
    if not sticky_code:
        return distance
    low = adc & sticky_mask
    stuck = ((low == 0) | (low == sticky_mask)) & (distance < sticky_range)
    return numpy.where(stuck, 0, distance)


def tick_values(adc, pedestal=None, sticky_code=False, neighbors=None):
    '''
    Return the per tick values compared to the threshold.

    Two arrays are returned: the value which opens and extends a block
    and the value of this channel alone, used to look ahead before
    closing a block.

    With neighbors, the first is the largest magnitude over the
    neighbor waveforms.  With a pedestal, the neighbors are pedestal
    subtracted and the channel's own value takes part too.
    '''
    if pedestal is None:
        own = numpy.abs(numpy.asarray(adc, dtype=numpy.int32))
    else:
        own = sticky_code_values(adc, pedestal, sticky_code)
    if neighbors is None:
        return own, own

    if pedestal is None:
        signal = numpy.zeros_like(own)
    else:
        signal = own.copy()
    for wave in neighbors:
        wave = numpy.asarray(wave, dtype=numpy.int32).ravel()
        if pedestal is not None:
            wave = wave - int(pedestal)
        signal = numpy.maximum(signal, numpy.abs(wave))
    return signal, own


def plain_blocks(signal, threshold):
    '''
    Return [begin, size] of each block of ticks above threshold.

    A block also includes the first tick below threshold after it.
    '''
    blocks = list()
    inside = False
    for tick, value in enumerate(signal):
        if value > threshold:
            if not inside:
                blocks.append([tick, 0])
                inside = True
            blocks[-1][1] += 1
        elif inside:
            blocks[-1][1] += 1
            inside = False
    return blocks


def merged_blocks(signal, lookahead, threshold, nearest_neighbor):
    '''
    Return [begin, size] of each block, merging nearby blocks.

    A block starts nearest_neighbor ticks before the first tick above
    threshold, or extends the previous block if that is close enough.
    It continues for nearest_neighbor ticks below threshold and then
    ends when the next two ticks are also below threshold.  Until
    then, further ticks below threshold do not add to the block size.
    '''
    blocks = list()
    inside = False
    tail = 0
    nticks = len(signal)
    for tick in range(nticks):
        above = signal[tick] > threshold
        if not inside:
            if not above:
                continue
            if blocks and tick - nearest_neighbor <= blocks[-1][0] + blocks[-1][1] + 1:
                blocks[-1][1] = tick - blocks[-1][0] + 1
            else:
                begin = max(tick - nearest_neighbor, 0)
                blocks.append([begin, tick - begin + 1])
            inside = True
        elif above:
            blocks[-1][1] += 1
            tail = 0
        elif tail < nearest_neighbor:
            tail += 1
            blocks[-1][1] += 1
        elif tick + 2 < nticks \
             and lookahead[tick + 1] <= threshold \
             and lookahead[tick + 2] <= threshold:
            tail = 0
            inside = False
    return blocks


def pack_blocks(adc, blocks):
    nticks = len(adc)
    header = [nticks, len(blocks)]
    header += [begin for begin, _ in blocks]
    header += [size for _, size in blocks]
    parts = [numpy.array(header, dtype=numpy.int16)]
    parts += [adc[begin:begin+size] for begin, size in blocks]
    return numpy.concatenate(parts).astype(numpy.int16)


def zero_suppression(adc, threshold=default_threshold, nearest_neighbor=None,
                     pedestal=None, sticky_code=False, neighbors=None):
    '''
    Return the zero suppressed waveform.

    - threshold :: a tick is signal if its value is above this
    - nearest_neighbor :: if given, merge blocks closer than this
    - pedestal :: if given, values are taken relative to it, see
      adc_sticky_code_check() for sticky_code
    - neighbors :: if given, an iterable of waveforms of nearby
      channels, eg a collections.deque, whose signal also makes blocks
      on this channel
    '''
    adc = as_adc(adc)
    check_nsamples(len(adc))
    if threshold < 0:
        raise ValueError(f'threshold must not be negative: {threshold}')

    signal, lookahead = tick_values(adc, pedestal, sticky_code, neighbors)
    if nearest_neighbor is None:
        blocks = plain_blocks(signal.tolist(), threshold)
    else:
        if nearest_neighbor < 0:
            raise ValueError(f'nearest neighbor must not be negative: {nearest_neighbor}')
        blocks = merged_blocks(signal.tolist(), lookahead.tolist(),
                               threshold, int(nearest_neighbor))
    return pack_blocks(adc, blocks)


def zero_unsuppression(adc, out=None, pedestal=None):
    '''
    Return the full waveform from a zero suppressed one.

    Ticks out of the blocks are 0 or the pedestal.  If out is given it
    is filled and returned.
    '''
    words = as_adc(adc)
    nticks = int(words[0])
    nblocks = int(words[1])
    fill = 0 if pedestal is None else pedestal
    if out is None:
        out = numpy.full(nticks, fill, dtype=numpy.int16)
    else:
        out[:nticks] = fill

    begins = words[2:2+nblocks].tolist()
    sizes = words[2+nblocks:2+2*nblocks].tolist()
    index = 2 + 2*nblocks
    for begin, size in zip(begins, sizes):
        out[begin:begin+size] = words[index:index+size]
        index += size
    return out


def compress_huffman(adc):
    '''
    Return the Huffman coded waveform.
    '''
    samples = as_adc(adc).tolist()
    if not samples:
        return numpy.zeros(0, dtype=numpy.int16)

    diffs = [0] + [wrap16(b - a) for a, b in zip(samples, samples[1:])]
    ndiffs = len(diffs)

    words = [samples[0]]
    word = coded_bit
    curb = 15
    index = 1
    while index < ndiffs:
        diff = diffs[index]
        if diff == 0 and index + 3 < ndiffs \
           and diffs[index+1] == diffs[index+2] == diffs[index+3] == 0:
            length = 1
            index += 3
        else:
            length = huffman_code_lengths.get(diff)

        if length is None:
            if curb != 15:
                words.append(word)
            word = coded_bit
            curb = 15
            value = samples[index]
            if abs(value) > max_literal:
                raise ValueError(f'sample {index} of magnitude {abs(value)} does not fit a Huffman raw word')
            if value > 0:
                words.append(value)
            else:
                words.append(-value | sign_bit)
        elif curb >= length:
            curb -= length
            word |= 1 << curb
        else:
            words.append(word)
            curb = 15 - length
            word = coded_bit | (1 << curb)
        index += 1

    words.append(word)
    return to_words(words)


def huffman_samples(adc):
    '''
    Yield the samples of a Huffman coded waveform until its words run
    out.
    '''
    words = [w & 0xFFFF for w in as_adc(adc).tolist()]
    if not words:
        return

    cur = wrap16(words[0])
    yield cur
    for index in range(1, len(words)):
        word = words[index]

        if not word & coded_bit:
            cur = word
            if word & sign_bit:
                cur = -(word & ~sign_bit)
            yield cur
            continue

        lowestb = 0
        while lowestb < 15 and not (word & (1 << lowestb)):
            lowestb += 1
        if lowestb > 14:
            log.warning(f'encoded word {index} has no set bits: {word:016b}')
            continue

        b = 14
        while b >= lowestb:
            zerocnt = 0
            while not (word & (1 << (b - zerocnt))) and b - zerocnt > lowestb:
                zerocnt += 1
            b -= zerocnt
            if zerocnt == 0:
                for _ in range(huffman_zero_run):
                    yield cur
                b -= 1
            elif zerocnt in huffman_deltas:
                cur = wrap16(cur + huffman_deltas[zerocnt])
                yield cur
                b -= 1


def uncompress_huffman(adc, nsamples=None, out=None):
    '''
    Return the waveform from a Huffman coded one.

    The coded form does not hold the number of samples: give it as
    nsamples or give an out array of that size to fill.
    '''
    if out is None:
        if nsamples is None:
            raise ValueError("the number of samples is needed to uncompress Huffman coding")
        out = numpy.zeros(nsamples, dtype=numpy.int16)
    for curu, value in zip(range(len(out)), huffman_samples(adc)):
        out[curu] = value
    return out


def fibonacci_numbers(limit):
    '''
    Return the Fibonacci numbers 1, 2, 3, 5, ... up to the first one
    above limit.
    '''
    numbers = [1, 2]
    while numbers[-1] <= limit:
        numbers.append(numbers[-1] + numbers[-2])
    return numbers

# Covers the largest zigzag value of a 16 bit difference.
fibonacci_table = fibonacci_numbers(0x10001)


def zeckendorf_bits(value):
    '''
    Return the bits, least significant first, of value written as a
    sum of non-consecutive Fibonacci numbers.
    '''
    bits = None
    while value:
        index = 0
        while fibonacci_table[index + 1] <= value:
            index += 1
        if bits is None:
            bits = [0] * (index + 1)
        bits[index] = 1
        value -= fibonacci_table[index]
    return bits or []


def compress_fibonacci(adc):
    '''
    Return the Fibonacci coded waveform.
    '''
    samples = as_adc(adc).tolist()
    if not samples:
        raise ValueError("can not Fibonacci code an empty waveform")
    check_nsamples(len(samples))

    stream = list()
    for prev, this in zip(samples, samples[1:]):
        diff = wrap16(this - prev)
        zigzag = 2 * diff if diff > 0 else -2 * diff + 1
        stream += zeckendorf_bits(zigzag)
        stream.append(1)

    words = [len(samples), samples[0]]
    start = 0
    while len(stream) - start > 16:
        words.append(pack_bits(stream[start:start+16]))
        start += 16
    words.append(pack_bits(stream[start:]))
    return to_words(words)


def pack_bits(bits):
    word = 0
    for index, bit in enumerate(bits):
        if bit:
            word |= 1 << index
    return word


def uncompress_fibonacci(adc, out=None):
    '''
    Return the waveform from a Fibonacci coded one.
    '''
    words = as_adc(adc).tolist()
    nsamples = words[0]
    if out is None:
        out = numpy.zeros(nsamples, dtype=numpy.int16)
    if nsamples <= 0:
        return out

    cur = words[1]
    out[0] = cur
    count = 1
    if count >= nsamples:
        return out

    bits = [(word >> index) & 1 for word in words[2:] for index in range(16)]
    last = len(bits) - 1
    chunk = list()
    for index, bit in enumerate(bits):
        chunk.append(bit)
        if not (len(chunk) >= 2 and chunk[-2] == 1 and bit == 1) and index != last:
            continue
        zigzag = sum(fibonacci_table[k] for k, b in enumerate(chunk[:-1]) if b)
        if zigzag % 2 == 0:
            diff = zigzag // 2
        else:
            diff = -((zigzag - 1) // 2)
        cur = wrap16(cur + diff)
        out[count] = cur
        count += 1
        chunk = list()
        if count >= nsamples:
            break
    return out


def compress(adc, mode, threshold=None, nearest_neighbor=None, pedestal=None,
             sticky_code=False, neighbors=None):
    '''
    Return the waveform compressed according to mode.

    The remaining arguments apply to zero suppression, see
    zero_suppression().  The threshold defaults to 5 ADC counts.
    '''
    mode = Compress.parse(mode)
    if threshold is None:
        threshold = default_threshold
    zskwds = dict(threshold=threshold, nearest_neighbor=nearest_neighbor,
                  pedestal=pedestal, sticky_code=sticky_code, neighbors=neighbors)

    if mode == Compress.NONE:
        encoded = as_adc(adc).copy()
    elif mode == Compress.HUFFMAN:
        encoded = compress_huffman(adc)
    elif mode == Compress.ZERO_SUPPRESSION:
        encoded = zero_suppression(adc, **zskwds)
    elif mode == Compress.ZERO_HUFFMAN:
        encoded = compress_huffman(zero_suppression(adc, **zskwds))
    elif mode == Compress.FIBONACCI:
        encoded = compress_fibonacci(adc)
    else:
        raise UnsupportedCompression(f'compress() does not support compression #{int(mode)}')
    log.debug(f'{mode.label()}: {numpy.size(adc)} samples -> {len(encoded)} words')
    return encoded


def compress_inplace(buffer, mode, **kwds):
    '''
    Replace the content of a mutable sequence, eg a list, with its
    compressed form.  See compress() for the arguments.
    '''
    buffer[:] = compress(buffer, mode, **kwds).tolist()
    return buffer


def uncompress(adc, mode, out=None, nsamples=None, pedestal=None):
    '''
    Return the waveform uncompressed according to mode.

    If out is given it is filled and returned.  Huffman coding needs
    either out or nsamples.  The pedestal fills the ticks removed by
    zero suppression.
    '''
    mode = Compress.parse(mode)
    words = as_adc(adc)

    if mode == Compress.HUFFMAN:
        return uncompress_huffman(words, nsamples=nsamples, out=out)
    if mode == Compress.ZERO_SUPPRESSION:
        return zero_unsuppression(words, out=out, pedestal=pedestal)
    if mode == Compress.ZERO_HUFFMAN:
        tmp = numpy.array(list(huffman_samples(words)), dtype=numpy.int16)
        return zero_unsuppression(tmp, out=out, pedestal=pedestal)
    if mode == Compress.NONE:
        if out is None:
            return words.copy()
        out[:len(words)] = words
        return out
    if mode == Compress.FIBONACCI:
        return uncompress_fibonacci(words, out=out)
    raise UnsupportedCompression(f'uncompress() does not support compression #{int(mode)}')


def neighbor_windows(frame, depth):
    '''
    Yield each waveform of a frame with those of the channels up to
    depth away on either side, itself included.

    The neighbors are held in a ring buffer.
    '''
    nchan = len(frame)
    ring = deque(maxlen=2*depth + 1)
    ahead = 0
    for chan in range(nchan):
        while ahead < nchan and ahead <= chan + depth:
            ring.append((ahead, frame[ahead]))
            ahead += 1
        while ring[0][0] < chan - depth:
            ring.popleft()
        yield frame[chan], [wave for _, wave in ring]


def compress_frame(frame, mode, neighbor_channels=0, **kwds):
    '''
    Return a list of the compressed waveforms of a 2D frame.

    The frame is indexed by (channel, tick).  With neighbor_channels,
    zero suppression of a channel also keeps the ticks where one of the
    channels that close has signal.  See compress() for the other
    arguments.
    '''
    frame = numpy.asarray(frame, dtype=numpy.int16)
    if frame.ndim == 1:
        frame = frame.reshape(1, -1)
    if frame.ndim != 2:
        raise ValueError(f'a frame must be 2D, got shape {frame.shape}')

    if not neighbor_channels:
        return [compress(wave, mode, **kwds) for wave in frame]
    return [compress(wave, mode, neighbors=neighbors, **kwds)
            for wave, neighbors in neighbor_windows(frame, neighbor_channels)]


def uncompress_frame(encoded, mode, nsamples=None, pedestal=None):
    '''
    Return the 2D frame from a sequence of compressed waveforms.

    The nsamples may be a single number or one per waveform.
    '''
    if nsamples is None or numpy.ndim(nsamples) == 0:
        nsamples = [nsamples] * len(encoded)
    waves = [uncompress(words, mode, nsamples=None if num is None else int(num), pedestal=pedestal)
             for words, num in zip(encoded, nsamples)]
    if not waves:
        return numpy.zeros((0, 0), dtype=numpy.int16)
    return numpy.vstack(waves)
