"""
Tests for submitting modifications:
- a submission opens a modification and bumps the target's pending count
- renaming an artist onto an existing name becomes a merge
- malformed submissions fail without writing anything
"""
import pytest

from cdindex.errors import InvalidModificationError, UnknownModeratorError
from cdindex.models import db, Artist, Album, Track, Modification
from cdindex.models.types import ModType, ModStatus
from cdindex.services.moderation import submit


def test_submit_opens_modification(catalog, fresh):
    mod_id = submit('Song A', 'Song B', ModType.EDIT_TRACKNAME, catalog.song_a,
                    catalog.beetles, catalog.alice)

    mod = fresh(Modification, mod_id)
    assert mod.status == ModStatus.OPEN
    assert mod.tab == 'tracks'
    assert mod.col == 'name'
    assert mod.row_id == catalog.song_a
    assert mod.prev_value == 'Song A'
    assert mod.new_value == 'Song B'
    assert mod.yes_votes == 0
    assert mod.no_votes == 0
    assert mod.moderator_id == catalog.alice
    assert mod.submitted_at is not None
    assert fresh(Track, catalog.song_a).mod_pending == 1


def test_conflicting_submissions_are_accepted(catalog, fresh):
    first = submit('Song A', 'Song B', ModType.EDIT_TRACKNAME, catalog.song_a,
                   catalog.beetles, catalog.alice)
    second = submit('Song A', 'Song C', ModType.EDIT_TRACKNAME, catalog.song_a,
                    catalog.beetles, catalog.bob)

    assert first != second
    assert fresh(Track, catalog.song_a).mod_pending == 2


def test_pending_count_lands_on_the_right_table(catalog, fresh):
    submit('Abbey Road', 'Abbey Rd.', ModType.EDIT_ALBUMNAME, catalog.album,
           catalog.beetles, catalog.alice)
    submit('Beetles', 'Beetles, The', ModType.EDIT_ARTISTSORTNAME, catalog.beetles,
           catalog.beetles, catalog.alice)

    assert fresh(Album, catalog.album).mod_pending == 1
    assert fresh(Artist, catalog.beetles).mod_pending == 1
    # Same numeric id in another table is untouched
    assert fresh(Track, catalog.album).mod_pending == 0


def test_artist_rename_onto_existing_name_becomes_merge(catalog, fresh):
    mod_id = submit('Beetles', 'The Beatles', ModType.EDIT_ARTISTNAME, catalog.beetles,
                    catalog.beetles, catalog.alice)

    mod = fresh(Modification, mod_id)
    assert mod.type == ModType.MERGE_ARTIST
    assert mod.tab == 'artists'
    assert mod.col == 'name'


def test_artist_rename_to_new_name_stays_an_edit(catalog, fresh):
    mod_id = submit('Beetles', 'Beatles', ModType.EDIT_ARTISTNAME, catalog.beetles,
                    catalog.beetles, catalog.alice)

    assert fresh(Modification, mod_id).type == ModType.EDIT_ARTISTNAME


def test_artist_rename_to_own_name_is_not_a_merge(catalog, fresh):
    mod_id = submit('Beetles', 'Beetles', ModType.EDIT_ARTISTNAME, catalog.beetles,
                    catalog.beetles, catalog.alice)

    assert fresh(Modification, mod_id).type == ModType.EDIT_ARTISTNAME


def test_unknown_type_is_rejected(catalog):
    with pytest.raises(InvalidModificationError):
        submit('a', 'b', 42, catalog.song_a, catalog.beetles, catalog.alice)
    assert Modification.query.count() == 0


def test_missing_target_row_is_rejected(catalog, fresh):
    with pytest.raises(InvalidModificationError):
        submit('a', 'b', ModType.EDIT_TRACKNAME, 9999, catalog.beetles, catalog.alice)
    assert Modification.query.count() == 0


def test_unknown_artist_is_rejected(catalog, fresh):
    with pytest.raises(InvalidModificationError):
        submit('Song A', 'b', ModType.EDIT_TRACKNAME, catalog.song_a, 9999, catalog.alice)
    assert fresh(Track, catalog.song_a).mod_pending == 0


def test_unknown_moderator_is_rejected(catalog, fresh):
    with pytest.raises(UnknownModeratorError):
        submit('Song A', 'b', ModType.EDIT_TRACKNAME, catalog.song_a, catalog.beetles, 9999)
    assert fresh(Track, catalog.song_a).mod_pending == 0
    assert db.session.query(Modification).count() == 0


def test_added_track_must_land_on_the_target_album(catalog, fresh):
    with pytest.raises(InvalidModificationError):
        submit(None, f'Octopus\n5\n{catalog.other_album}', ModType.ADD_TRACK, catalog.album,
               catalog.beetles, catalog.alice)

    assert Modification.query.count() == 0
    assert fresh(Album, catalog.album).mod_pending == 0
    assert fresh(Album, catalog.other_album).mod_pending == 0


def test_added_track_naming_its_target_album_is_accepted(catalog, fresh):
    mod_id = submit(None, f'Octopus\n5\n{catalog.album}', ModType.ADD_TRACK, catalog.album,
                    catalog.beetles, catalog.alice)

    assert fresh(Modification, mod_id).tab == 'albums'
    assert fresh(Album, catalog.album).mod_pending == 1
