"""Player router: transport controls and the upcoming queue."""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from saafy.domain.catalog.models import Song
from saafy.domain.playback.engine import PlaybackEngine

from ..deps import get_player
from ..schemas import (
    MediaErrorReport,
    PlayRequest,
    ProgressReport,
    QueueAddRequest,
    SeekRequest,
    VolumeRequest,
)
from ..serialize import song_from_payload

router = APIRouter()


def _state(player: PlaybackEngine) -> dict:
    return player.snapshot().to_dict()


@router.get("/state")
async def get_state(player: PlaybackEngine = Depends(get_player)):
    return _state(player)


@router.post("/play")
async def play(request: PlayRequest, player: PlaybackEngine = Depends(get_player)):
    """Play a song; `context` is the list it was picked from."""
    if request.song is not None:
        song = song_from_payload(request.song)
    elif request.song_id:
        song = Song(id=request.song_id, name=request.song_id)
    else:
        raise HTTPException(422, "song or songId required")

    context = None
    if request.context is not None:
        context = [song_from_payload(item) for item in request.context]

    logger.info(f"Play request: song={song.id}, context={len(context) if context else 0}")
    started = await player.play_song(song, context)
    return {"started": started, "state": _state(player)}


@router.post("/toggle")
async def toggle(player: PlaybackEngine = Depends(get_player)):
    is_playing = await player.toggle_play()
    return {"isPlaying": is_playing, "state": _state(player)}


@router.post("/next")
async def next_track(player: PlaybackEngine = Depends(get_player)):
    advanced = await player.handle_next()
    return {"advanced": advanced, "state": _state(player)}


@router.post("/previous")
async def previous_track(player: PlaybackEngine = Depends(get_player)):
    changed = await player.handle_previous()
    return {"changed": changed, "state": _state(player)}


@router.post("/seek")
async def seek(request: SeekRequest, player: PlaybackEngine = Depends(get_player)):
    position = await player.seek_to(request.position)
    return {"position": position}


@router.post("/volume")
async def set_volume(request: VolumeRequest, player: PlaybackEngine = Depends(get_player)):
    volume = await player.set_volume(request.volume)
    return {"volume": volume}


@router.post("/shuffle")
async def toggle_shuffle(player: PlaybackEngine = Depends(get_player)):
    return {"shuffleMode": player.toggle_shuffle()}


@router.post("/repeat")
async def toggle_repeat(player: PlaybackEngine = Depends(get_player)):
    return {"repeatMode": player.toggle_repeat().value}


# Queue


@router.get("/queue")
async def get_queue(player: PlaybackEngine = Depends(get_player)):
    return [song.to_dict() for song in player.queue]


@router.post("/queue")
async def add_to_queue(request: QueueAddRequest, player: PlaybackEngine = Depends(get_player)):
    player.add_to_queue(song_from_payload(request.song), announce=request.announce)
    return [song.to_dict() for song in player.queue]


@router.delete("/queue/{index}")
async def remove_from_queue(index: int, player: PlaybackEngine = Depends(get_player)):
    if not player.remove_from_queue(index):
        raise HTTPException(404, f"No queue entry at index {index}")
    return [song.to_dict() for song in player.queue]


@router.delete("/queue")
async def clear_queue(player: PlaybackEngine = Depends(get_player)):
    player.clear_queue()
    return []


# Reports from a client that plays the audio itself (audio_backend = "none")


@router.post("/progress")
async def report_progress(report: ProgressReport, player: PlaybackEngine = Depends(get_player)):
    if report.duration is not None:
        player.on_duration(report.duration)
    player.on_time_update(report.position)
    if report.ended:
        player.on_ended()
    return {"progress": player.progress, "duration": player.duration}


@router.post("/error")
async def report_media_error(report: MediaErrorReport, player: PlaybackEngine = Depends(get_player)):
    player.on_error(report.message)
    return {"ok": True}


@router.delete("/error")
async def clear_error(player: PlaybackEngine = Depends(get_player)):
    player.clear_error()
    return _state(player)
