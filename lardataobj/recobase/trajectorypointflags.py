#!/usr/bin/env python
'''
Flags pertaining to a point of a trajectory or track.

Each point carries a set of 32 tri-state flags and, optionally, the
index of the hit it was made from.  The flags are grouped by purpose:

- trajectory flags [0, 8) :: properties of the point itself
- track flags [8, 16) :: how the point was used by the track fit
- experiment flags [16, 24) :: reserved for experiment-specific use
- user flags [24, 32) :: reserved for the final user

Within each group flags are meant to be set exclusively, by
convention.
'''

import logging

from lardataobj.util.bitmask import Flag, to_flag
from lardataobj.util.flagset import FlagSet

log = logging.getLogger("lardataobj.recobase")


class TrajectoryPointFlagTraits:
    '''
    Index and name of the flags of a trajectory point.
    '''

    MaxFlags = 32

    BeginTrajectoryFlags = 0
    EndTrajectoryFlags = 8
    BeginTrackFlags = 8
    EndTrackFlags = 16
    BeginExperimentReservedFlags = 16
    EndExperimentReservedFlags = 24
    BeginUserReservedFlags = 24
    EndUserReservedFlags = 32

    # trajectory flags
    HitIgnored = Flag(0)        # hit was not included in the computation of the point
    NoPoint = Flag(1)           # the trajectory point is not defined
    Suspicious = Flag(2)        # point of questionable quality, not covered by the others
    Merged = Flag(3)            # hit charge includes charge from other particles
    DeltaRay = Flag(4)          # hit charge includes a delta ray
    DetectorIssue = Flag(5)     # the hit is affected by a detector problem
    Shared = Flag(6)            # hit is shared with other reconstructed objects
    TrajReserved1 = Flag(7)

    # track flags
    ExcludedFromFit = Flag(8)   # the point was not used by the fit
    Rejected = Flag(9)          # the hit does not belong to the track
    Reinterpreted = Flag(10)    # the hit was re-interpreted by the track
    TrackReserved5 = Flag(11)
    TrackReserved4 = Flag(12)
    TrackReserved3 = Flag(13)
    TrackReserved2 = Flag(14)
    TrackReserved1 = Flag(15)

    custom_names = (
        "HitIgnored", "NoPoint", "Suspicious", "Merged", "DeltaRay",
        "DetectorIssue", "Shared", "ExcludedFromFit", "Rejected",
        "Reinterpreted",
    )

    names = ()

    @classmethod
    def max_flags(cls):
        return cls.MaxFlags

    @staticmethod
    def decorate_flag_name(base_name, index):
        return f'{base_name}{index}'

    @classmethod
    def invalid_flag_name(cls, flag):
        return "<" + cls.decorate_flag_name("InvalidFlag", to_flag(flag).index) + ">"

    @classmethod
    def init_names(cls):
        '''
        Return the table of flag names.

        Flags without a custom name are named after their range and
        numbered backwards, the last flag of each range being 1.
        '''
        names = [None] * cls.MaxFlags
        ranges = (
            (cls.BeginTrajectoryFlags, cls.EndTrajectoryFlags, "TrajectoryReserved"),
            (cls.BeginTrackFlags, cls.EndTrackFlags, "TrackReserved"),
            (cls.BeginExperimentReservedFlags, cls.EndExperimentReservedFlags, "ExperimentFlag"),
            (cls.BeginUserReservedFlags, cls.EndUserReservedFlags, "UserFlag"),
        )
        for begin, end, base_name in ranges:
            nflags = end - begin
            for dflag in range(nflags):
                names[begin + dflag] = cls.decorate_flag_name(base_name, nflags - dflag)
        for name in cls.custom_names:
            names[getattr(cls, name).index] = name
        return tuple(names)

    @classmethod
    def is_flag(cls, flag):
        return to_flag(flag).index < cls.MaxFlags

    @classmethod
    def name(cls, flag):
        '''
        Return the name of the flag.
        '''
        index = to_flag(flag).index
        if index >= len(cls.names):
            return cls.invalid_flag_name(index)
        return cls.names[index]


TrajectoryPointFlagTraits.names = TrajectoryPointFlagTraits.init_names()


class TrajectoryPointFlags:
    '''
    Set of flags of a trajectory point and the index of its hit.
    '''

    flag = TrajectoryPointFlagTraits

    InvalidHitIndex = 2**32 - 1

    def __init__(self, from_hit=None, *flags):
        '''
        Without arguments, the flags are the default ones and there is
        no original hit.  Otherwise only the given flags (or masks) are
        defined.
        '''
        if from_hit is None and not flags:
            self._from_hit = self.InvalidHitIndex
            self._flags = self.default_flags()
            return
        self._from_hit = self.InvalidHitIndex if from_hit is None else int(from_hit)
        self._flags = FlagSet(self.flag.MaxFlags, *flags)

    @classmethod
    def default_flags_mask(cls):
        '''
        Return the mask of a default point.

        All named flags are defined and unset.
        '''
        return cls.make_mask(*[-getattr(cls.flag, name) for name in cls.flag.custom_names])

    @classmethod
    def default_flags(cls):
        return FlagSet(cls.flag.MaxFlags, cls.default_flags_mask())

    @classmethod
    def make_mask(cls, *flags):
        '''
        Return a mask merging the given flags and masks.
        '''
        return FlagSet(cls.flag.MaxFlags, *flags).copy_mask()

    # -- access to flags

    def n_flags(self):
        return self.flag.max_flags()

    def is_allocated(self, flag):
        return self._flags.is_allocated(flag)

    def is_flag(self, flag):
        return self._flags.is_flag(flag)

    def is_defined(self, flag):
        return self._flags.is_defined(flag)

    def test(self, flag):
        return self._flags.test(flag)

    def get(self, flag):
        return self._flags.get(flag)

    def is_set(self, flag):
        return self._flags.is_set(flag)

    def is_unset(self, flag):
        return self._flags.is_unset(flag)

    def any_set(self, mask):
        return self._flags.any_set(mask)

    def none_set(self, mask):
        return self._flags.none_set(mask)

    def match(self, mask):
        return self._flags.match(mask)

    def mask(self):
        '''
        Return the flags as a BitMask.
        '''
        return self._flags.copy_mask()

    def flags(self):
        return self._flags.copy()

    def from_hit(self):
        return self._from_hit

    def has_original_hit_index(self):
        return self._from_hit != self.InvalidHitIndex

    # -- named predicates

    def is_hit_ignored(self):
        return self.is_set(self.flag.HitIgnored)

    def is_point_valid(self):
        return not self.is_set(self.flag.NoPoint)

    def is_merged(self):
        return self.is_set(self.flag.Merged)

    def is_shared(self):
        return self.is_set(self.flag.Shared)

    def is_delta_ray(self):
        return self.is_set(self.flag.DeltaRay)

    def has_detector_issues(self):
        return self.is_set(self.flag.DetectorIssue)

    def is_otherwise_suspicious(self):
        return self.is_set(self.flag.Suspicious)

    def is_exclusive(self):
        return not (self.is_merged() or self.is_shared())

    def is_excluded_from_fit(self):
        return self.is_set(self.flag.ExcludedFromFit)

    def belongs_to_track(self):
        return not self.is_set(self.flag.Rejected)

    def is_hit_reinterpreted(self):
        return self.is_set(self.flag.Reinterpreted)

    def is_included_in_fit(self):
        return not self.is_excluded_from_fit()

    def is_point_flawed(self):
        return self.is_merged() or self.is_shared() or self.is_delta_ray() \
            or self.has_detector_issues() or self.is_otherwise_suspicious()

    def is_point_flawless(self):
        return not self.is_point_flawed()

    # -- output

    def dump(self, verbosity=1, indent="", indent_first=None):
        '''
        Return a single line listing the flags which are set.

        - verbosity 0 :: number of flags set and their indices
        - verbosity 1 :: names and indices of the flags set

        The indent is not used since the output is a single line.
        '''
        if indent_first is None:
            indent_first = indent
        on = [index for index in range(self.flag.MaxFlags)
              if self._flags.is_set(index)]
        if verbosity <= 0:
            body = f'{len(on)} flags set'
            if on:
                body += ": " + " ".join(f'[{index}]' for index in on)
        elif not on:
            body = "no flag set"
        else:
            body = "flags: " + " ".join(
                f'{self.flag.name(index)}[{index}]' for index in on)
        if self.has_original_hit_index():
            body += f' (from hit #{self._from_hit})'
        else:
            body += " (no original hit)"
        return indent_first + body

    def __str__(self):
        return self.dump()

    def __repr__(self):
        return f'TrajectoryPointFlags({self._flags.dump()}, from_hit={self._from_hit})'

    def __eq__(self, other):
        if not isinstance(other, TrajectoryPointFlags):
            return NotImplemented
        return self._from_hit == other._from_hit and self._flags == other._flags

    def __hash__(self):
        return hash((self._from_hit, self._flags.presence, self._flags.values))
