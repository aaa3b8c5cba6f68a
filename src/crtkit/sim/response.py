"""Response of the CRT scintillator strips and of their front-end electronics.

This covers:
- the light yield at the readout end(s) of a strip, attenuated along the
  strip length and, for CERN modules, across the strip width;
- the Poisson fluctuation of the number of photoelectrons (PE);
- the time response (PE-dependent discriminator delay, interpolator
  resolution and light propagation delay) in trigger clock ticks;
- the charge digitization in ADC counts.
"""

import numpy as np

from crtkit.utils.logger import logger

__all__ = ["CRTResponse"]

# Light yield (PE) of a normally incident MIP as a function of the distance to
# the readout (m), quadratic fit to MINOS test stand data
LY_COEFFS = (36.5425, -6.3895, 0.3742)

# Transverse attenuation of CERN strips between the two fibers (cm)
CERN_CENTER_COEFFS = (
    0.682976,
    -0.0204477,
    -0.000707564,
    0.000636617,
    0.000147957,
    -3.89078e-05,
)

# Transverse attenuation of CERN strips right of both fibers
CERN_RIGHT_COEFFS = (0.139941, 0.168238, -0.0198199, 0.000781752)

# Transverse attenuation of CERN strips left of both fibers
CERN_LEFT_COEFFS = (8.78875, 3.54602, 0.595592, 0.0449169, 0.00127892)

# Transverse position of the fibers in CERN strips (cm)
CERN_FIBER_POS = 5.5

# CERN strips are thicker than the others
CERN_YIELD_FACTOR = 1.5


def polyval(coeffs, x, odd_sign=1.0):
    """Evaluates a polynomial in increasing order of powers.

    Parameters
    ----------
    coeffs : Tuple[float]
        Polynomial coefficients, constant term first
    x : float
        Point to evaluate the polynomial at
    odd_sign : float, default 1.
        Sign applied to the odd terms of the polynomial. A sign of -1
        evaluates the mirror polynomial, i.e. `P(-x)`

    Returns
    -------
    float
        Value of the polynomial
    """
    return sum(
        c * (odd_sign if i % 2 else 1.0) * x**i for i, c in enumerate(coeffs)
    )


class CRTResponse:
    """Simulates the response of a CRT strip to an energy deposit.

    Attributes
    ----------
    rng : np.random.Generator
        Random number generator
    """

    def __init__(
        self,
        global_t0_offset=0.0,
        t_delay_norm=4125.74,
        t_delay_shift=-300.31,
        t_delay_sigma=90.392,
        t_delay_offset=-1.525,
        t_delay_rms_gaus_norm=2.09138,
        t_delay_rms_gaus_shift=7.23993,
        t_delay_rms_gaus_sigma=170.027,
        t_delay_rms_exp_norm=1.6544,
        t_delay_rms_exp_shift=75.6183,
        t_delay_rms_exp_scale=79.3543,
        prop_delay=6.1,
        prop_delay_error=0.7,
        t_res_interpolator=1.268,
        use_edep=True,
        q0=0.0017,
        q_ped=63.6,
        q_slope=131.9,
        q_rms=15.0,
        clock_frequency=16.0,
        seed=None,
    ):
        """Initialize the response parameters.

        Parameters
        ----------
        global_t0_offset : float, default 0.
            Offset added to the true deposit time (ns)
        t_delay_norm, t_delay_shift, t_delay_sigma, t_delay_offset : float
            Parameters of the Gaussian dependence of the mean discriminator
            delay (ns) on the number of PE
        t_delay_rms_gaus_norm, t_delay_rms_gaus_shift, t_delay_rms_gaus_sigma : float
            Parameters of the Gaussian term of the delay RMS (ns)
        t_delay_rms_exp_norm, t_delay_rms_exp_shift, t_delay_rms_exp_scale : float
            Parameters of the exponential term of the delay RMS (ns)
        prop_delay : float, default 6.1
            Light propagation delay in the fibers (ns/m)
        prop_delay_error : float, default 0.7
            Uncertainty on the light propagation delay (ns/m)
        t_res_interpolator : float, default 1.268
            Time resolution of the interpolator (ns)
        use_edep : bool, default True
            Scale the light yield with the deposited energy
        q0 : float, default 0.0017
            Energy deposited by a normally incident MIP (GeV)
        q_ped : float, default 63.6
            ADC pedestal
        q_slope : float, default 131.9
            ADC counts per PE
        q_rms : float, default 15.
            ADC RMS per square root of the number of PE
        clock_frequency : float, default 16.
            Frequency of the trigger clock (MHz)
        seed : int, optional
            Seed of the random number generator
        """
        assert q0 > 0.0, "The MIP energy deposit must be positive."
        assert clock_frequency > 0.0, "The clock frequency must be positive."

        self.global_t0_offset = global_t0_offset
        self.t_delay_norm = t_delay_norm
        self.t_delay_shift = t_delay_shift
        self.t_delay_sigma = t_delay_sigma
        self.t_delay_offset = t_delay_offset
        self.t_delay_rms_gaus_norm = t_delay_rms_gaus_norm
        self.t_delay_rms_gaus_shift = t_delay_rms_gaus_shift
        self.t_delay_rms_gaus_sigma = t_delay_rms_gaus_sigma
        self.t_delay_rms_exp_norm = t_delay_rms_exp_norm
        self.t_delay_rms_exp_shift = t_delay_rms_exp_shift
        self.t_delay_rms_exp_scale = t_delay_rms_exp_scale
        self.prop_delay = prop_delay
        self.prop_delay_error = prop_delay_error
        self.t_res_interpolator = t_res_interpolator
        self.use_edep = use_edep
        self.q0 = q0
        self.q_ped = q_ped
        self.q_slope = q_slope
        self.q_rms = q_rms
        self.clock_frequency = clock_frequency

        self.rng = np.random.default_rng(seed)

    @staticmethod
    def light_yield(distance):
        """Mean number of PE of a MIP at a given distance from the readout.

        Parameters
        ----------
        distance : float
            Distance to the readout end of the strip (m)

        Returns
        -------
        float
            Mean number of PE
        """
        return polyval(LY_COEFFS, distance)

    @staticmethod
    def transverse_attenuation(module_type, x):
        """Fractions of the light collected by the two fibers of a strip.

        Only CERN strips have two fibers, the light yield of the other strips
        does not depend on the transverse position.

        Parameters
        ----------
        module_type : str
            Module type ('c', 'd' or 'm')
        x : float
            Transverse position in the strip frame (cm)

        Returns
        -------
        float
            Attenuation factor of the first fiber
        float
            Attenuation factor of the second fiber
        """
        if module_type != "c":
            return 1.0, 1.0

        if abs(x) <= CERN_FIBER_POS:
            return (
                polyval(CERN_CENTER_COEFFS, x),
                polyval(CERN_CENTER_COEFFS, x, -1.0),
            )

        if x > CERN_FIBER_POS:
            return polyval(CERN_RIGHT_COEFFS, x), polyval(CERN_LEFT_COEFFS, x, -1.0)

        return polyval(CERN_LEFT_COEFFS, x), polyval(CERN_RIGHT_COEFFS, x, -1.0)

    def expected_pe(self, module_type, position, energy, half_length):
        """Mean number of PE at each readout of a strip.

        Parameters
        ----------
        module_type : str
            Module type ('c', 'd' or 'm')
        position : np.ndarray
            (3) Deposit position in the strip frame (cm)
        energy : float
            Deposited energy (GeV)
        half_length : float
            Half-length of the strip (cm)

        Returns
        -------
        np.ndarray
            (3) Mean number of PE on the first fiber, on the second fiber and
            at the far end of the first fiber
        np.ndarray
            (2) Distance from the deposit to the near and the far end (m)
        """
        scale = energy / self.q0 if self.use_edep else 1.0
        if module_type == "c":
            scale *= CERN_YIELD_FACTOR

        # Distance along the strip to each end
        distances = np.array(
            [abs(half_length - position[2]), abs(-half_length - position[2])]
        ) * 0.01

        # Light yield, attenuated along and across the strip
        near = self.light_yield(distances[0]) * scale
        far = self.light_yield(distances[1]) * scale
        abs0, abs1 = self.transverse_attenuation(module_type, position[0])
        npe = np.array([near * abs0, near * abs1, far * abs0])

        if np.any(npe < 0.0):
            logger.info("Negative expected number of PE: %s", npe)

        return npe, distances

    def sample_pe(self, mean):
        """Draws the observed number of PE.

        Parameters
        ----------
        mean : float
            Mean number of PE (negative values yield no PE)

        Returns
        -------
        int
            Observed number of PE
        """
        return int(self.rng.poisson(max(mean, 0.0)))

    def delay_mean(self, npe):
        """Mean discriminator delay for a given number of PE (ns)."""
        return (
            self.t_delay_norm
            * np.exp(-0.5 * ((npe - self.t_delay_shift) / self.t_delay_sigma) ** 2)
            + self.t_delay_offset
        )

    def delay_rms(self, npe):
        """RMS of the discriminator delay for a given number of PE (ns)."""
        return self.t_delay_rms_gaus_norm * np.exp(
            -((npe - self.t_delay_rms_gaus_shift) ** 2) / self.t_delay_rms_gaus_sigma
        ) + self.t_delay_rms_exp_norm * np.exp(
            -(npe - self.t_delay_rms_exp_shift) / self.t_delay_rms_exp_scale
        )

    def to_ticks(self, time):
        """Converts a time in ns to trigger clock ticks.

        Parameters
        ----------
        time : float
            Time (ns)

        Returns
        -------
        int
            Number of clock ticks
        """
        return int(time / 1e3 * self.clock_frequency)

    def trigger_ticks(self, time, npe, distance):
        """Simulates the time at which a channel triggers.

        Parameters
        ----------
        time : float
            True deposit time (ns)
        npe : int
            Number of PE
        distance : float
            Distance to the readout end (m)

        Returns
        -------
        int
            Trigger time in clock ticks
        """
        delay = self.rng.normal(self.delay_mean(npe), self.delay_rms(npe))
        delay += self.rng.normal(0.0, self.t_res_interpolator)
        prop = self.rng.normal(self.prop_delay, self.prop_delay_error) * distance

        return self.to_ticks(time + self.global_t0_offset + prop + delay)

    def pps_ticks(self):
        """Time of the channel relative to the last PPS, drawn at random.

        Returns
        -------
        int
            Clock ticks since the last PPS
        """
        return int(self.rng.integers(0, int(self.clock_frequency * 1e6)))

    def adc(self, npe):
        """Simulates the charge digitization.

        Parameters
        ----------
        npe : int
            Number of PE

        Returns
        -------
        int
            Charge in ADC counts, truncated to a 16-bit integer
        """
        charge = self.rng.normal(
            self.q_ped + self.q_slope * npe, self.q_rms * np.sqrt(npe)
        )
        info = np.iinfo(np.int16)
        adc = int(np.clip(np.trunc(charge), info.min, info.max))
        if adc < 0:
            logger.info("Negative ADC value: %d", adc)

        return adc
