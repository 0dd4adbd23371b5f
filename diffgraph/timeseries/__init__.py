r"""@package diffgraph.timeseries

Time series models whose likelihood is built as an expression graph.

The kalman.KalmanFilter chains its update equations across all observations,
so that the final likelihood can be differentiated w.r.t. the model
parameters and minimized e.g. using diffgraph.optimize.
"""

from .kalman import KalmanParameters, KalmanFilter, kalman_likelihood
