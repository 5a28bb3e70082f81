"""HIV care quality indicators.

Defines and evaluates clinical quality indicators, such as counts of HIV
care visits, against a patient/encounter database.
"""

__version__ = "0.1.0"
