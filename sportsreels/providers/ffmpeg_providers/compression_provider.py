import asyncio
import tempfile
import aiofiles
import ffmpeg
from pathlib import Path
from loguru import logger
from typing import Any, Callable, Dict, Optional
from sportsreels.providers.base import CompressionProvider
from sportsreels.utils.error_handler import convert_exceptions
from sportsreels.utils.error_handler import ProviderException
from sportsreels.video_pipeline.core.models import MediaFile


class FFmpegCompressionProvider(CompressionProvider):
    """
    Single-pass proxy-style compression with the ffmpeg CLI:
    - downscale spatially (max width) and temporally (max fps)
    - CRF quality-based x264 encoding
    - AAC audio at a fixed bitrate

    The original file is returned when the encoded output is not smaller.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.max_width = int(config.get("max_width", 1280))
        self.max_fps = float(config.get("max_fps", 30.0))
        self.crf = int(config.get("crf", 28))
        self.preset = config.get("preset", "fast")
        self.audio_bitrate = int(config.get("audio_bitrate_kbps", 128))

    def _probe_duration(self, path: str) -> Optional[float]:
        try:
            probe = ffmpeg.probe(path)
            duration = float(probe["format"]["duration"])
            logger.info(f"Video duration: {duration:.2f} seconds")
            return duration
        except (ffmpeg.Error, KeyError, ValueError) as e:
            logger.warning(f"Could not get video duration: {e}")
            return None

    def _build_command(self, input_path: str, output_path: str):
        return [
            "ffmpeg",
            "-y",
            "-hide_banner",
            "-i",
            input_path,
            "-r",
            str(self.max_fps),
            "-vf",
            f"scale='min({self.max_width},iw)':-2",
            "-c:v",
            "libx264",
            "-preset",
            self.preset,
            "-crf",
            str(self.crf),
            "-c:a",
            "aac",
            "-b:a",
            f"{self.audio_bitrate}k",
            "-movflags",
            "+faststart",
            "-progress",
            "pipe:1",
            "-nostats",
            output_path,
        ]

    async def _run(self, command, duration: Optional[float], on_progress: Optional[Callable[[float], None]]):
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stderr_task = asyncio.create_task(process.stderr.read())
            async for raw_line in process.stdout:
                key, _, value = raw_line.decode(errors="ignore").strip().partition("=")
                if key == "out_time_ms" and duration and on_progress:
                    try:
                        # ffmpeg reports out_time_ms in microseconds
                        on_progress(min(99.0, int(value) / 1_000_000 / duration * 100))
                    except ValueError:
                        pass
            err = await stderr_task
            await process.wait()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        logger.debug(f"--- ffmpeg stderr ---\n{err.decode(errors='ignore').strip()}")
        if process.returncode != 0:
            raise ProviderException(
                f"ffmpeg exited with code {process.returncode}",
                details={"stderr": err.decode(errors="ignore")[-2000:]},
            )

    @convert_exceptions({Exception: ProviderException})
    async def compress(self, media: MediaFile, on_progress: Optional[Callable[[float], None]] = None) -> MediaFile:
        with tempfile.TemporaryDirectory(prefix="sportsreels-") as workdir:
            input_path = Path(workdir) / f"input{media.extension or '.mp4'}"
            output_path = Path(workdir) / "output.mp4"

            async with aiofiles.open(input_path, "wb") as f:
                await f.write(media.data)

            duration = media.duration or await asyncio.to_thread(self._probe_duration, str(input_path))

            logger.info(f"Starting compression of {media.filename} ({media.size} bytes)")
            await self._run(self._build_command(str(input_path), str(output_path)), duration, on_progress)

            async with aiofiles.open(output_path, "rb") as f:
                data = await f.read()

        if on_progress:
            on_progress(100.0)

        if len(data) >= media.size:
            logger.info(f"Compressed output is not smaller ({len(data)} >= {media.size}), keeping original")
            return media

        logger.info(f"Compressed {media.filename}: {media.size} -> {len(data)} bytes")
        stem = media.filename.rsplit(".", 1)[0] if "." in media.filename else media.filename
        return MediaFile(filename=f"{stem}.mp4", content_type="video/mp4", data=data, duration=duration)
