"""Moderation enumerations and their display names."""
from enum import IntEnum

from flask_babel import lazy_gettext as _l


class ModType(IntEnum):
    EDIT_ARTISTNAME = 1
    EDIT_ARTISTSORTNAME = 2
    EDIT_ALBUMNAME = 3
    EDIT_TRACKNAME = 4
    EDIT_TRACKNUM = 5
    MERGE_ARTIST = 6
    ADD_TRACK = 7


class ModStatus(IntEnum):
    OPEN = 1
    APPLIED = 2
    FAILEDVOTE = 3
    FAILEDDEP = 4
    ERROR = 5


class VoteValue(IntEnum):
    ABSTAIN = -1
    NO = 0
    YES = 1


class ListType(IntEnum):
    NEW = 1      # open, submitted by others, not yet voted on
    VOTED = 2    # voted on by the moderator
    MINE = 3     # submitted by the moderator


EDIT_TYPES = frozenset([
    ModType.EDIT_ARTISTNAME,
    ModType.EDIT_ARTISTSORTNAME,
    ModType.EDIT_ALBUMNAME,
    ModType.EDIT_TRACKNAME,
    ModType.EDIT_TRACKNUM,
])

# (table, column) each modification type writes to
TARGETS = {
    ModType.EDIT_ARTISTNAME: ('artists', 'name'),
    ModType.EDIT_ARTISTSORTNAME: ('artists', 'sortname'),
    ModType.EDIT_ALBUMNAME: ('albums', 'name'),
    ModType.EDIT_TRACKNAME: ('tracks', 'name'),
    ModType.EDIT_TRACKNUM: ('tracks', 'sequence'),
    ModType.MERGE_ARTIST: ('artists', 'name'),
    ModType.ADD_TRACK: ('albums', None),
}

MOD_NAMES = {
    ModType.EDIT_ARTISTNAME: _l('Edit Artist Name'),
    ModType.EDIT_ARTISTSORTNAME: _l('Edit Artist Sortname'),
    ModType.EDIT_ALBUMNAME: _l('Edit Album Name'),
    ModType.EDIT_TRACKNAME: _l('Edit Track Name'),
    ModType.EDIT_TRACKNUM: _l('Edit Track Number'),
    ModType.MERGE_ARTIST: _l('Merge Artist'),
    ModType.ADD_TRACK: _l('Add Track'),
}

STATUS_NAMES = {
    ModStatus.OPEN: _l('Open'),
    ModStatus.APPLIED: _l('Change applied'),
    ModStatus.FAILEDVOTE: _l('Failed vote'),
    ModStatus.FAILEDDEP: _l('Failed dependency'),
    ModStatus.ERROR: _l('Internal Error'),
}

VOTE_TEXT = {
    VoteValue.ABSTAIN: _l('Abstain'),
    VoteValue.NO: _l('No'),
    VoteValue.YES: _l('Yes'),
}


def modification_name(mod_type):
    return MOD_NAMES.get(mod_type)


def status_name(status):
    return STATUS_NAMES.get(status)


def vote_text(vote):
    if vote is None:
        return None
    return VOTE_TEXT.get(vote)
