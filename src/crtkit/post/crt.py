"""Post-processors in charge of the CRT reconstruction and simulation."""

from crtkit.data import Trigger
from crtkit.match import CRTT0Matcher
from crtkit.sim import CRTDetSim

from .base import PostBase

__all__ = ["CRTMatchProcessor", "CRTSimProcessor"]


class CRTMatchProcessor(PostBase):
    """Associates TPC tracks with CRT hits and assigns them a time."""

    # Name of the post-processor (as specified in the configuration)
    name = "crt_t0_match"

    # Alternative allowed names of the post-processor
    aliases = ("crt_match",)

    def __init__(self, crthit_key="crthits", track_keys="tracks", trigger_key=None, **kwargs):
        """Initialize the CRT/TPC matching post-processor.

        Parameters
        ----------
        crthit_key : str, default 'crthits'
            Data product key which provides the CRT hits
        track_keys : Union[str, List[str]], default 'tracks'
            Data product key(s) which provide the TPC tracks
        trigger_key : str, optional
            Data product key which provides the trigger information. If not
            specified, the trigger timestamp is assumed to be 0
        **kwargs : dict
            Keyword arguments to pass to the CRT T0 matching algorithm
        """
        # Store the data product keys
        if isinstance(track_keys, str):
            track_keys = [track_keys]
        self.crthit_key = crthit_key
        self.track_keys = list(track_keys)
        self.trigger_key = trigger_key

        self.update_keys({crthit_key: True})
        self.update_keys({k: True for k in self.track_keys})
        if trigger_key is not None:
            self.update_keys({trigger_key: True})

        # Initialize the matcher
        self.matcher = CRTT0Matcher(**kwargs)

    def process(self, data):
        """Find the CRT hit matched to each track.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            One list of :class:`CRTMatch` per track collection, stored
            under `<track_key>_crt_matches`
        """
        # Fetch the trigger time
        trigger_timestamp = 0
        if self.trigger_key is not None:
            trigger = data[self.trigger_key]
            if isinstance(trigger, Trigger):
                trigger_timestamp = trigger.timestamp
            else:
                trigger_timestamp = int(trigger)

        # Match each collection of tracks
        crthits = data[self.crthit_key]
        result = {}
        for key in self.track_keys:
            result[f"{key}_crt_matches"] = self.matcher.match_tracks(
                data[key], crthits, trigger_timestamp
            )

        return result


class CRTSimProcessor(PostBase):
    """Simulates the CRT front-end readout from true energy deposits."""

    # Name of the post-processor (as specified in the configuration)
    name = "crt_sim"

    # Alternative allowed names of the post-processor
    aliases = ("crt_detsim",)

    def __init__(self, deposit_key="crt_deposits", output_key="crt_data", **kwargs):
        """Initialize the CRT simulation post-processor.

        Parameters
        ----------
        deposit_key : str, default 'crt_deposits'
            Data product key which provides the true energy deposits
        output_key : str, default 'crt_data'
            Data product key under which to store the readouts
        **kwargs : dict
            Keyword arguments to pass to the CRT simulation
        """
        self.deposit_key = deposit_key
        self.output_key = output_key
        self.update_keys({deposit_key: True})

        # Initialize the simulation
        self.detsim = CRTDetSim(**kwargs)

    def process(self, data):
        """Simulate the front-end readouts of one entry.

        Parameters
        ----------
        data : dict
            Dictionary of data products

        Returns
        -------
        dict
            Readouts, stored under the output key, and the event counters,
            stored under `<output_key>_counters`
        """
        readouts, counters = self.detsim.simulate(data[self.deposit_key])

        return {
            self.output_key: readouts,
            f"{self.output_key}_counters": dict(counters),
        }
