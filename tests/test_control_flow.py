import pytest

from chip8.errors import InvalidOpcode, StackOverflow, StackUnderflow


def test_non_branching_instructions_advance_pc_by_two(make_chip):
    chip = make_chip(0x6001, 0x7001, 0x8010, 0xA300, 0xF015, 0x00E0)
    for expected in (0x202, 0x204, 0x206, 0x208, 0x20A, 0x20C):
        chip.step()
        assert chip.pc == expected


def test_jump(make_chip):
    chip = make_chip(0x1456)
    chip.step()
    assert chip.pc == 0x456


def test_jump_plus_v0(make_chip):
    chip = make_chip(0x6010, 0xB300)
    chip.run(2)
    assert chip.pc == 0x310


def test_call_then_return_round_trips(make_chip):
    # 0x200: CALL 0x206 / 0x202: LD V0, 1 / 0x204: JP 0x204 / 0x206: RET
    chip = make_chip(0x2206, 0x6001, 0x1204, 0x00EE)
    chip.step()
    assert chip.pc == 0x206
    assert chip.call_stack == (0x202,)
    chip.step()
    assert chip.pc == 0x202
    assert chip.sp == 0


def test_seventeenth_nested_call_overflows(make_chip):
    # every CALL targets itself, so each step nests one level deeper
    chip = make_chip(0x2200)
    chip.run(16)
    assert chip.sp == 16

    with pytest.raises(StackOverflow) as excinfo:
        chip.step()
    assert excinfo.value.depth == 16
    assert chip.sp == 16
    assert chip.pc == 0x200


def test_return_on_empty_stack_underflows(make_chip):
    chip = make_chip(0x00EE)
    chip.delay = 5
    with pytest.raises(StackUnderflow):
        chip.step()
    assert chip.pc == 0x200
    assert chip.delay == 5


def test_invalid_opcode_propagates_and_leaves_pc(make_chip):
    chip = make_chip(0x6001, 0x5121)
    chip.step()
    with pytest.raises(InvalidOpcode) as excinfo:
        chip.step()
    assert excinfo.value.address == 0x202
    assert chip.pc == 0x202


@pytest.mark.parametrize(
    "opcode, vx, taken",
    [(0x3142, 0x42, True), (0x3142, 0x41, False), (0x4142, 0x41, True), (0x4142, 0x42, False)],
)
def test_skip_register_against_immediate(make_chip, opcode, vx, taken):
    chip = make_chip(opcode)
    chip.V[1] = vx
    chip.step()
    assert chip.pc == (0x204 if taken else 0x202)


@pytest.mark.parametrize(
    "opcode, vx, vy, taken",
    [(0x5120, 3, 3, True), (0x5120, 3, 4, False), (0x9120, 3, 4, True), (0x9120, 3, 3, False)],
)
def test_skip_register_against_register(make_chip, opcode, vx, vy, taken):
    chip = make_chip(opcode)
    chip.V[1] = vx
    chip.V[2] = vy
    chip.step()
    assert chip.pc == (0x204 if taken else 0x202)


def test_run_counts_cycles(make_chip):
    chip = make_chip(0x1200)
    chip.run(10)
    assert chip.cycle_count == 10
    assert chip.pc == 0x200
