r"""@package diffgraph

Differentiable expression graphs over real-valued parameters.

Expressions are composed from parameters and constants using ordinary
arithmetic and a few transcendental functions. The resulting graph can be
evaluated numerically and, more importantly, differentiated symbolically with
respect to any of its parameters. The derivatives are again expression graphs
and can hence be evaluated or differentiated further.

The core lives in the diffgraph.exprs package. Consumers of the core are the
Newton's method driver in diffgraph.optimize and the Kalman filter likelihood
in diffgraph.timeseries. The linear systems of the Newton steps are solved by
the helpers in diffgraph.linalg.
"""
