"""
Goal Timer - support managers
Preferences file, completion sound and native desktop notifications.
"""

import json
import logging
import subprocess
import sys
from pathlib import Path

try:
    import numpy as np
    import pygame
    SOUND_AVAILABLE = True
except ImportError:
    SOUND_AVAILABLE = False

logger = logging.getLogger("goaltimer.managers")

SOUND_NAMES = ["Beep", "Chime", "Bell", "Alarm", "None"]

# ===================== CONFIG MANAGER =====================

class ConfigManager:
    """Persists user preferences. Goals are never stored here."""

    DEFAULTS = {
        "theme": None,
        "sound": "Chime",
        "notifications": True,
        "window_size": "500x400",
    }

    def __init__(self, config_file=None):
        if config_file is None:
            config_file = Path.home() / ".goaltimer" / "goaltimer_config.json"
        self.config_file = Path(config_file)
        self.data = self.load()

    def load(self):
        data = dict(self.DEFAULTS)
        if not self.config_file.exists():
            return data

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
            return data

        if isinstance(loaded, dict):
            data.update(loaded)
        else:
            logger.warning("Ignoring config %s: expected a JSON object", self.config_file)
        return data

    def save(self):
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.error("Could not save config %s: %s", self.config_file, e)

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value):
        self.data[key] = value
        self.save()

# ===================== NOTIFICATION MANAGER =====================

class NotificationManager:
    """Native OS notification; failures are logged, never raised"""

    def __init__(self, enabled=True, platform=None):
        self.enabled = enabled
        self.platform = platform or sys.platform

    def show(self, title, message):
        if not self.enabled:
            return False

        try:
            if self.platform == "darwin":
                script = f"display notification {json.dumps(message)} with title {json.dumps(title)}"
                subprocess.run(["osascript", "-e", script], check=False)
            elif self.platform.startswith("linux"):
                subprocess.run(["notify-send", title, message], check=False)
            elif self.platform == "win32":
                from plyer import notification
                notification.notify(title=title, message=message, timeout=10)
            else:
                logger.debug("No native notifications on %s", self.platform)
                return False
        except (OSError, ImportError, NotImplementedError) as e:
            logger.warning("Notification error: %s", e)
            return False
        return True

# ===================== SOUND MANAGER =====================

class SoundManager:
    """Generated tones played through the pygame mixer"""

    TONES = {
        "Beep": (440, 0.15),
        "Chime": (880, 0.25),
        "Bell": (1760, 0.2),
        "Alarm": (600, 0.35),
    }

    def __init__(self, enabled=True):
        self.sounds = {}
        self.current_playing = None
        self.available = False

        if enabled and SOUND_AVAILABLE:
            try:
                pygame.mixer.init(frequency=44100, size=-16, channels=2, buffer=512)
                self.available = True
            except pygame.error as e:
                logger.warning("Sound disabled, mixer init failed: %s", e)

        if self.available:
            for name, (freq, duration) in self.TONES.items():
                self.sounds[name] = self._create_tone(freq, duration)

    def _create_tone(self, freq, duration):
        sr = 44100
        n = int(duration * sr)
        t = np.linspace(0, duration, n, False)
        wave = np.sin(freq * t * 2 * np.pi)

        fade = int(sr * 0.01)
        wave[:fade] *= np.linspace(0, 1, fade)
        wave[-fade:] *= np.linspace(1, 0, fade)

        audio = (wave * 32767).astype(np.int16)
        stereo = np.repeat(audio.reshape(n, 1), 2, axis=1)
        try:
            return pygame.sndarray.make_sound(stereo)
        except pygame.error as e:
            logger.warning("Could not build %d Hz tone: %s", freq, e)
            return None

    def play(self, sound_name, loop=False):
        sound = self.sounds.get(sound_name)
        if not self.available or sound is None:
            return False

        sound.play(loops=-1 if loop else 0)
        self.current_playing = sound
        return True

    def stop(self):
        if self.current_playing is not None:
            self.current_playing.stop()
            self.current_playing = None
