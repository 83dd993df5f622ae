import pytest

from chip8.errors import OutOfRange


@pytest.mark.parametrize(
    "opcode, pressed, taken",
    [(0xE39E, True, True), (0xE39E, False, False), (0xE3A1, True, False), (0xE3A1, False, True)],
)
def test_skip_on_key_state(make_chip, opcode, pressed, taken):
    chip = make_chip(opcode)
    chip.V[3] = 0xB
    chip.set_key(0xB, pressed)
    chip.step()
    assert chip.pc == (0x204 if taken else 0x202)


def test_wait_for_key_spins_until_pressed(make_chip):
    chip = make_chip(0xF50A)
    chip.delay = 3
    chip.sound = 1
    registers = bytes(chip.V)

    for _ in range(4):
        chip.step()
        assert chip.pc == 0x200
        assert chip.waiting_for_key
        assert bytes(chip.V) == registers

    assert chip.read_delay_timer() == 0
    assert chip.read_sound_timer() == 0

    chip.set_key(0x9, True)
    chip.set_key(0x4, True)
    chip.step()
    assert chip.V[5] == 0x4
    assert chip.pc == 0x202
    assert not chip.waiting_for_key


def test_timers_tick_once_per_step_and_stop_at_zero(make_chip):
    chip = make_chip(0x6002, 0xF015, 0xF018, 0xF307, 0x1208)
    chip.step()
    chip.step()
    assert chip.read_delay_timer() == 1
    chip.step()
    assert chip.read_delay_timer() == 0
    assert chip.read_sound_timer() == 1
    chip.step()
    assert chip.V[3] == 0
    assert chip.read_sound_timer() == 0
    chip.run(3)
    assert chip.read_delay_timer() == 0
    assert chip.read_sound_timer() == 0


def test_delay_timer_read_happens_before_tick(make_chip):
    chip = make_chip(0xF307)
    chip.delay = 10
    chip.step()
    assert chip.V[3] == 10
    assert chip.read_delay_timer() == 9


def test_set_key_is_bounds_checked(make_chip):
    chip = make_chip(0x1200)
    with pytest.raises(OutOfRange):
        chip.set_key(16, True)
    with pytest.raises(IndexError):
        chip.set_key(-1, True)
    chip.set_key(0xF, 1)
    assert chip.is_key_pressed(0xF) is True


def test_key_skip_uses_low_nibble_of_register(make_chip):
    chip = make_chip(0xE39E, 0xE3A1)
    chip.V[3] = 0x1B
    chip.set_key(0xB, True)
    chip.step()
    assert chip.pc == 0x204

    chip.pc = 0x202
    chip.step()
    assert chip.pc == 0x204
