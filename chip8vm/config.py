# ---- Configuration ----
# Defaults for the host window and pacing loop. The CLI can override
# the scale and both frequencies.

SCALE = 10        # window pixels per CHIP-8 pixel

CPU_HZ = 500      # instructions per second
TIMER_HZ = 60     # delay/sound timer ticks per second

# Buzzer
BEEP_FREQUENCY = 440
BEEP_DURATION = 0.2
BEEP_PITCH_VARIATION = 15

PIXEL_ON_COLOR = (255, 255, 255, 255)
PIXEL_OFF_COLOR = (0, 0, 0, 255)
