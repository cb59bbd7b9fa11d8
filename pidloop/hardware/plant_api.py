import time


class PlantAPI:
    """Abstract process under control. Replace with a driver for the real sensor
    and actuator; the control laws only call read_feedback() and write_output().
    """
    def __init__(self):
        self.last_output = 0.0

    def read_feedback(self) -> float:
        raise NotImplementedError

    def write_output(self, value: float):
        self.last_output = float(value)
        self._apply_output(self.last_output)

    def _apply_output(self, value: float):
        """Override in subclass to send the command to hardware."""
        pass


class UnityFeedbackPlant(PlantAPI):
    """Sensed value is exactly the last actuation (closed-loop simulation)."""
    def __init__(self, initial=0.0):
        super().__init__()
        self.value = float(initial)

    def read_feedback(self):
        return self.value

    def _apply_output(self, value):
        self.value = value


class FirstOrderPlant(PlantAPI):
    """Discrete first-order lag: y += dt/tau * (gain*u - y)."""
    def __init__(self, gain=1.0, tau=5.0, dt=1.0, initial=0.0):
        super().__init__()
        if tau <= 0 or dt <= 0:
            raise ValueError("tau and dt must be positive")
        self.gain = float(gain)
        self.tau = float(tau)
        self.dt = float(dt)
        self.value = float(initial)

    def read_feedback(self):
        return self.value

    def _apply_output(self, value):
        self.value += self.dt / self.tau * (self.gain * value - self.value)


class MockPlant(PlantAPI):
    """Wraps another plant and logs every actuation."""
    def __init__(self, inner: PlantAPI, log_fn=print):
        super().__init__()
        self.inner = inner
        self.log = log_fn

    def read_feedback(self):
        return self.inner.read_feedback()

    def _apply_output(self, value):
        self.inner.write_output(value)
        self.log(f"[PLANT] output => {value:.4f} (feedback {self.inner.read_feedback():.4f})")


class TracePlant(PlantAPI):
    """Wraps another plant and records the feedback seen after every actuation."""
    def __init__(self, inner: PlantAPI):
        super().__init__()
        self.inner = inner
        self.trace = []

    def read_feedback(self):
        return self.inner.read_feedback()

    def _apply_output(self, value):
        self.inner.write_output(value)
        self.trace.append(self.inner.read_feedback())


class NullPacer:
    def wait(self): pass


class SleepPacer:
    """Holds each round to a fixed control period."""
    def __init__(self, period_s=0.01):
        if period_s < 0:
            raise ValueError("period_s must be >= 0")
        self.period_s = float(period_s)

    def wait(self):
        if self.period_s > 0:
            time.sleep(self.period_s)
