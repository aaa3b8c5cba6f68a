"""Event-level simulation of the CRT front-end readout.

Converts the true energy deposits in the CRT strips into front-end board
readouts, going through the strip response, the channel thresholds and the
front-end trigger logic.
"""

from collections import Counter

from crtkit.data import CRTChannelData
from crtkit.geo import CRTModules, geo_factory
from crtkit.utils.logger import logger

from .channels import channel_map, layer_id, stack_id
from .coincidence import CoincidenceConfig, Tagger, trigger_readouts
from .response import CRTResponse

__all__ = ["CRTDetSim"]


class CRTDetSim:
    """Simulates the CRT front-end readout of an event.

    All durations are configured in nanoseconds.
    """

    def __init__(
        self,
        geo=None,
        detector=None,
        modules=None,
        verbose=False,
        q_threshold_c=60.0,
        q_threshold_m=60.0,
        q_threshold_d=60.0,
        strip_coincidence_window=30.0,
        apply_coincidence_c=True,
        apply_coincidence_m=True,
        apply_coincidence_d=True,
        layer_coincidence_window_c=150.0,
        layer_coincidence_window_m=150.0,
        layer_coincidence_window_d=150.0,
        dead_time=22000.0,
        bias_time=50.0,
        response=None,
    ):
        """Initialize the simulation.

        Parameters
        ----------
        geo : Geometry, optional
            Detector geometry, which must include the CRT modules
        detector : str, optional
            Name of the detector, used to load the geometry if it is not provided
        modules : Union[CRTModules, List[dict]], optional
            CRT modules, which override those of the geometry
        verbose : bool, default False
            Log the simulated hits and the event counters
        q_threshold_c, q_threshold_m, q_threshold_d : float, default 60.
            Channel threshold (ADC) of each module type
        strip_coincidence_window : float, default 30.
            Maximum time difference between the two fibers of a CERN strip (ns)
        apply_coincidence_c, apply_coincidence_m, apply_coincidence_d : bool, default True
            Whether the coincidence is required for each module type
        layer_coincidence_window_c, layer_coincidence_window_m, layer_coincidence_window_d : float, default 150.
            Coincidence window of each module type (ns)
        dead_time : float, default 22000.
            Front-end board dead time after a readout (ns)
        bias_time : float, default 50.
            Time within which a repeated channel is merged into a readout (ns)
        response : dict, optional
            Strip response parameters, passed to :class:`CRTResponse`
        """
        # Load the CRT modules
        if modules is None:
            if geo is None:
                assert detector is not None, (
                    "Must provide the CRT modules, a geometry or the name of a detector."
                )
                geo = geo_factory(detector)
            assert geo.crt is not None, "The geometry does not define any CRT module."
            modules = geo.crt
        elif not isinstance(modules, CRTModules):
            modules = CRTModules(modules)
        self.modules = modules

        # Initialize the strip response
        self.response = CRTResponse(**(response or {}))

        # Store the thresholds
        self.verbose = verbose
        self.thresholds = {"c": q_threshold_c, "m": q_threshold_m, "d": q_threshold_d}
        self.strip_coincidence_window = strip_coincidence_window

        # Initialize the trigger logic, which works in microseconds
        self.config = CoincidenceConfig(
            clock_frequency=self.response.clock_frequency,
            apply_coincidence={
                "c": apply_coincidence_c,
                "m": apply_coincidence_m,
                "d": apply_coincidence_d,
            },
            windows={
                "c": layer_coincidence_window_c * 1e-3,
                "m": layer_coincidence_window_m * 1e-3,
                "d": layer_coincidence_window_d * 1e-3,
            },
            dead_time=dead_time * 1e-3,
            bias_time=bias_time * 1e-3,
        )

    def ticks_to_ns(self, ticks):
        """Converts trigger clock ticks to nanoseconds."""
        return ticks / self.response.clock_frequency * 1e3

    def simulate(self, deposits):
        """Simulates the readouts of an event.

        Parameters
        ----------
        deposits : List[CRTDeposit]
            True energy deposits in the CRT strips

        Returns
        -------
        List[CRTData]
            Front-end board readouts
        Counter
            Counters of simulated hits, readouts and lost hits
        """
        counters = Counter()
        boards = {}
        for dep in deposits:
            self.process_deposit(dep, boards, counters)

        # Freeze the boards and apply the trigger logic
        taggers = {
            mac5: Tagger(
                mac5=mac5,
                type=b["type"],
                region=b["region"],
                stack=b["stack"],
                layers=frozenset(b["layers"]),
                chan_layers=b["chan_layers"],
                data=tuple(b["data"]),
            )
            for mac5, b in boards.items()
        }
        readouts, trig_counters = trigger_readouts(taggers, self.config)
        counters.update(trig_counters)

        if self.verbose:
            self.log_counters(readouts, counters)

        return readouts, counters

    def process_deposit(self, dep, boards, counters):
        """Simulates the response to one deposit and stores the channel
        records above threshold in their front-end board.

        Parameters
        ----------
        dep : CRTDeposit
            True energy deposit
        boards : dict
            Front-end board content, updated in place
        counters : Counter
            Event counters, updated in place
        """
        # Fetch the module and strip
        module = self.modules.get(dep.module_id)
        if module is None:
            logger.warning("Unknown CRT module %d, skipping deposit.", dep.module_id)
            counters["unknown_module"] += 1
            return

        if not 0 <= dep.strip_id < module.num_strips:
            logger.warning(
                "Strip %d out of range in CRT module %d (%d strips), skipping deposit.",
                dep.strip_id,
                module.id,
                module.num_strips,
            )
            counters["unknown_strip"] += 1
            return

        mtype = module.type
        if mtype == "e":
            logger.info("Could not determine the type of CRT module %s.", module.name)
            counters["unknown_type"] += 1
            return

        counters[f"sim_{mtype}"] += 1
        if not module.contains_local(dep.position):
            logger.info(
                "Deposit outside of the sensitive volume of strip %d in "
                "CRT module %d: %s",
                dep.strip_id,
                module.id,
                dep.position,
            )

        # Simulate the light yield and the observed number of PE
        resp = self.response
        npe_exp, dists = resp.expected_pe(
            mtype, dep.position, dep.energy, module.strip_half_length
        )
        npe0, npe1, npe0_dual = [resp.sample_pe(m) for m in npe_exp]

        # Simulate the channel timing and charge
        t0 = resp.trigger_ticks(dep.time, npe0, dists[0])
        t1 = resp.trigger_ticks(dep.time, npe1, dists[0])
        t0_dual = resp.trigger_ticks(dep.time, npe0_dual, dists[1])
        pps = resp.pps_ticks()
        q0, q1, q0_dual = resp.adc(npe0), resp.adc(npe1), resp.adc(npe0_dual)

        # Locate the strip in the readout
        cmap = channel_map(mtype, module.id, dep.strip_id)
        layer = layer_id(module, dep.strip_id)
        stack = stack_id(module)

        def store(mac5, records):
            board = boards.setdefault(
                mac5, {"layers": set(), "chan_layers": {}, "data": []}
            )
            board["type"] = mtype
            board["region"] = module.region
            board["stack"] = stack
            board["layers"].add(layer)
            for record in records:
                board["chan_layers"][record.channel] = layer
                board["data"].append(record)

        # Apply the thresholds (and the fiber coincidence for CERN strips)
        thr = self.thresholds[mtype]
        dt = self.ticks_to_ns(abs(t0 - t1))
        passed = False
        if mtype == "c":
            if q0 > thr and q1 > thr and dt < self.strip_coincidence_window:
                ch0, ch1 = cmap.channels
                store(
                    cmap.mac5,
                    [
                        CRTChannelData(ch0, t0, pps, q0),
                        CRTChannelData(ch1, t1, pps, q1),
                    ],
                )
                counters["above_threshold_c"] += 1
                passed = True
            if q0 < thr or q1 < thr:
                counters["lost_threshold_c"] += 1
            if dt >= self.strip_coincidence_window:
                counters["lost_strip_coincidence_c"] += 1

        elif mtype == "d":
            if q0 > thr:
                store(cmap.mac5, [CRTChannelData(cmap.channels[0], t0, pps, q0)])
                counters["above_threshold_d"] += 1
                passed = True
            if q0 < thr:
                counters["lost_threshold_d"] += 1

        else:
            if q0 > thr:
                store(cmap.mac5, [CRTChannelData(cmap.channels[0], t0, pps, q0)])
                counters["above_threshold_m"] += 1
                passed = True
            if q0_dual > thr:
                store(
                    cmap.dual_mac5,
                    [CRTChannelData(cmap.channels[0], t0_dual, pps, q0_dual)],
                )
                counters["above_threshold_m"] += 1
                passed = True
            if q0 < thr or q0_dual < thr:
                counters["lost_threshold_m"] += 1

        if self.verbose and passed:
            logger.info(
                "CRT hit in module %s (type: %s, region: %s), strip %d, "
                "mac5: %d, channel: %d, layer: %d\n"
                "  expected PE: %s, observed PE: (%d, %d, %d)\n"
                "  ADC: (%d, %d, %d), ticks: (%d, %d, %d)",
                module.name,
                mtype,
                module.region,
                dep.strip_id,
                cmap.mac5,
                cmap.channels[0],
                layer,
                npe_exp,
                npe0,
                npe1,
                npe0_dual,
                q0,
                q1,
                q0_dual,
                t0,
                t1,
                t0_dual,
            )

    @staticmethod
    def log_counters(readouts, counters):
        """Logs the event counters.

        Parameters
        ----------
        readouts : List[CRTData]
            Front-end board readouts
        counters : Counter
            Event counters
        """
        names = {"c": "CERN", "d": "DC", "m": "MINOS"}
        lines = [f"CRT triggered readouts: {len(readouts)}"]
        for mtype, name in names.items():
            above = counters[f"above_threshold_{mtype}"]
            lines.append(f"{name} simulated hits: {counters[f'sim_{mtype}']}")
            lines.append(f"{name} hits above threshold: {above}")
            lines.append(
                f"{name} hits lost to threshold: {counters[f'lost_threshold_{mtype}']}"
            )
            for key, label in (
                ("lost_track_and_hold", "track and hold"),
                ("lost_dead_time", "dead time"),
                ("lost_coincidence", "coincidence"),
                ("readout_hits", "readouts (hits)"),
            ):
                count = counters[f"{key}_{mtype}"]
                frac = 100.0 * count / above if above else 0.0
                lines.append(f"{name} {label}: {count} ({frac:.1f}%)")
            lines.append(f"{name} readouts: {counters[f'readouts_{mtype}']}")

        lines.append(
            f"CERN hits lost to fiber coincidence: {counters['lost_strip_coincidence_c']}"
        )
        for mtype in ("c", "d"):
            lines.append(
                f"{names[mtype]} boards lost to open coincidence: "
                f"{counters[f'lost_open_coincidence_{mtype}']}"
            )

        lines.append("FEB readouts per CRT region:")
        for key in sorted(k for k in counters if k.startswith("region_")):
            lines.append(f"  {key[len('region_'):]}: {counters[key]}")

        logger.info("\n".join(lines))
