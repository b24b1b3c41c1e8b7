# Delay (DT) and sound (ST) timers, counted down toward zero at TIMER_HZ.
# The buzzer sounds whenever ST is non-zero.


def tick(vm):
    """Count DT and ST down by one (never below zero). Returns True while ST is active."""
    if vm.dt > 0:
        vm.dt -= 1
    if vm.st > 0:
        vm.st -= 1
    return vm.st > 0
