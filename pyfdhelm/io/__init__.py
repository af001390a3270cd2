from .power_density import (PowerDensityRecord, PowerDensitySink,
                            StreamPowerDensitySink, RecordingPowerDensitySink)
__all__=['PowerDensityRecord','PowerDensitySink','StreamPowerDensitySink','RecordingPowerDensitySink']
