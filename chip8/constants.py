# CHIP8 machine constants.
# Memory - 4096 bytes: 0x000-0x1FF is reserved for the interpreter (the hex font
# lives at the very bottom), programs are loaded from 0x200 upwards.
# Display - 64x32 monochrome pixels.
#----------------------------------------------------------------------------------------------

# ---- Configuration ----
SCALE = 10
WIDTH, HEIGHT = 64, 32
CPU_HZ = 500          # instructions per second
TIMER_HZ = 60         # delay/sound timer and refresh rate
MAX_FRAME_SLICES = 4  # cap on how many frames of instructions one late slice may catch up

# ---- Memory map ----
MEMORY_SIZE = 4096
PROGRAM_START = 0x200
MEMORY_END = 0xFFF
MAX_PROGRAM_SIZE = MEMORY_END - PROGRAM_START + 1   # 0xE00 bytes

REGISTER_COUNT = 16
STACK_DEPTH = 16
KEY_COUNT = 16

FONT_START = 0x000
FONT_GLYPH_SIZE = 5

# Standard CHIP-8 fontset (80 bytes), one 8x5 glyph per hex digit
FONTSET = [
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
] #notice 80 bytes

# ---- Colours (RGBA) ----
PIXEL_ON = (255, 255, 255, 255)
PIXEL_OFF = (0, 0, 0, 255)

# ---- Beep ----
BEEP_FREQUENCY = 440
BEEP_DURATION = 0.2
SAMPLE_RATE = 44100
