import pytest

import edgy
from edgy.exceptions import FieldDefinitionError
from edgy.testclient import DatabaseTestClient
from edgy_sortable import SortableModel, SortedManyRelation, SortedManyToMany
from tests.settings import DATABASE_URL

pytestmark = pytest.mark.anyio

database = DatabaseTestClient(DATABASE_URL, full_isolation=False)
models = edgy.Registry(database=database)


class Track(edgy.Model):
    title = edgy.CharField(max_length=100)

    class Meta:
        registry = models


class PlaylistTrack(SortableModel):
    position = edgy.IntegerField(null=True)

    class Meta:
        abstract = True


class AlbumTrack(SortableModel):
    position_column_name = "place"

    place = edgy.IntegerField(null=True)

    class Meta:
        abstract = True


class Playlist(edgy.Model):
    name = edgy.CharField(max_length=100)
    tracks = SortedManyToMany(Track, through=PlaylistTrack)

    class Meta:
        registry = models


class Album(edgy.Model):
    name = edgy.CharField(max_length=100)
    tracks = SortedManyToMany(Track, through=AlbumTrack, embed_through="membership")

    class Meta:
        registry = models


def playlist_through() -> type[SortableModel]:
    return Playlist.meta.fields["tracks"].through


@pytest.fixture(scope="function")
async def create_test_database():
    async with database:
        await models.create_all()
        yield
        if not database.drop:
            await models.drop_all()


async def create_tracks(faker, amount: int) -> list[Track]:
    return [await Track.query.create(title=faker.sentence()) for _ in range(amount)]


def test_through_model_is_created_from_abstract_sortable():
    assert issubclass(playlist_through(), PlaylistTrack)
    assert playlist_through().get_position_column_name() == "position"
    assert Album.meta.fields["tracks"].through.get_position_column_name() == "place"


async def test_relation_is_sorted(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())

    assert isinstance(playlist.tracks, SortedManyRelation)
    assert playlist.tracks.get_queryset()._order_by == ("position",)


async def test_added_tracks_get_increasing_positions(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())
    tracks = await create_tracks(faker, 3)

    for track in tracks:
        await playlist.tracks.add(track)

    memberships = await playlist_through().query.filter(playlist=playlist).order_by("position")

    assert [membership.position for membership in memberships] == [1, 2, 3]
    assert [membership.track.pk for membership in memberships] == [track.pk for track in tracks]
    assert [track.pk for track in await playlist.tracks.all()] == [track.pk for track in tracks]


async def test_positions_are_counted_per_owner(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())
    other = await Playlist.query.create(name=faker.word())
    track1, track2 = await create_tracks(faker, 2)

    await playlist.tracks.add(track1)
    await playlist.tracks.add(track2)
    await other.tracks.add(track2)

    membership = await playlist_through().query.get(playlist=other, track=track2)

    assert membership.position == 1


async def test_tracks_follow_new_order(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())
    track1, track2, track3 = await create_tracks(faker, 3)

    for track in (track1, track2, track3):
        await playlist.tracks.add(track)

    assert [track.pk for track in await playlist.tracks.all()] == [track1.pk, track2.pk, track3.pk]

    memberships = {
        membership.track.pk: membership
        for membership in await playlist_through().query.filter(playlist=playlist)
    }
    await playlist_through().set_new_order(
        [memberships[track.pk].pk for track in (track3, track1, track2)]
    )

    assert [track.pk for track in await playlist.tracks.all()] == [track3.pk, track1.pk, track2.pk]


async def test_create_and_stage_assign_positions(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())

    await playlist.tracks.create(title=faker.sentence())
    staged = await Track.query.create(title=faker.sentence())
    playlist.tracks.stage(staged)
    await playlist.tracks.save_related()

    memberships = await playlist_through().query.filter(playlist=playlist).order_by("position")

    assert [membership.position for membership in memberships] == [1, 2]
    assert memberships[1].track.pk == staged.pk


async def test_explicit_through_position_is_kept(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())
    track1, track2 = await create_tracks(faker, 2)

    await playlist.tracks.add(playlist_through()(playlist=playlist, track=track1, position=5))
    await playlist.tracks.add(track2)

    tracks = await playlist.tracks.all()
    assert [track.pk for track in tracks] == [track1.pk, track2.pk]

    membership = await playlist_through().query.get(playlist=playlist, track=track2)
    assert membership.position == 6


async def test_empty_relation(create_test_database, faker):
    playlist = await Playlist.query.create(name=faker.word())

    assert await playlist.tracks.all() == []


async def test_embedded_through_uses_prefixed_custom_column(create_test_database, faker):
    album = await Album.query.create(name=faker.word())
    track1, track2, track3 = await create_tracks(faker, 3)
    AlbumTracks = Album.meta.fields["tracks"].through

    await album.tracks.add(AlbumTracks(album=album, track=track1, place=3))
    await album.tracks.add(AlbumTracks(album=album, track=track2, place=1))
    await album.tracks.add(AlbumTracks(album=album, track=track3, place=2))

    assert album.tracks.get_queryset()._order_by == ("membership__place",)

    tracks = await album.tracks.all()

    assert [track.pk for track in tracks] == [track2.pk, track3.pk, track1.pk]
    assert [track.membership.place for track in tracks] == [1, 2, 3]


def test_through_is_required():
    with pytest.raises(FieldDefinitionError) as raised:

        class Broken(edgy.Model):
            tracks = SortedManyToMany(Track)

    assert raised.value.args[0] == '"through" is required for SortedManyToMany.'


def test_embed_through_false_is_rejected():
    with pytest.raises(FieldDefinitionError) as raised:

        class Broken(edgy.Model):
            tracks = SortedManyToMany(Track, through=PlaylistTrack, embed_through=False)

    assert raised.value.args[0] == '"embed_through" cannot be False for SortedManyToMany.'


def test_invalid_order_policy_is_rejected():
    with pytest.raises(FieldDefinitionError):

        class Broken(edgy.Model):
            tracks = SortedManyToMany(Track, through=PlaylistTrack, order_policy="shuffle")
