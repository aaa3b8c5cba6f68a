"""Post-processors which run the CRT reconstruction on a dictionary of
data products.

- `PostManager`: loads the post-processors and feeds them data
- `CRTMatchProcessor`: CRT hit to TPC track matching
- `CRTSimProcessor`: CRT front-end readout simulation
"""

from .crt import CRTMatchProcessor, CRTSimProcessor
from .manager import PostManager
