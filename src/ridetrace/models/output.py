"""Wire models: the JSON summary printed/returned and the timeseries payload uploaded."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ridetrace.analysis.best_average import ChannelExtremum
from ridetrace.analysis.merge import MergedPoint
from ridetrace.analysis.zones import PowerZone


class IntervalBest(BaseModel):
    interval: int
    value: float
    offset: int

    @classmethod
    def from_extremum(cls, ex: ChannelExtremum) -> "IntervalBest":
        return cls(interval=ex.interval, value=ex.value, offset=ex.offset)


class MergedDataItem(BaseModel):
    """Compact per-point record; single-letter keys keep the upload small."""
    model_config = ConfigDict(populate_by_name=True)

    power: int = Field(alias="p")
    distance: float = Field(alias="d")
    time: float = Field(alias="t")
    elevation: float = Field(alias="e")
    heart_rate: int = Field(alias="h")
    grade: float = Field(alias="g")

    @classmethod
    def from_point(cls, point: MergedPoint) -> "MergedDataItem":
        return cls(
            power=point.power,
            distance=point.distance,
            time=point.time,
            elevation=point.elevation,
            heart_rate=point.heart_rate,
            grade=point.grade,
        )


class TimeseriesPayload(BaseModel):
    coordinates: List[List[float]]
    elevation: List[MergedDataItem]


class PowerZoneOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    zone: int
    title: str
    power_low: Optional[int] = Field(alias="powerLow")
    power_high: Optional[int] = Field(alias="powerHigh")

    @classmethod
    def from_zone(cls, zone: PowerZone) -> "PowerZoneOut":
        return cls(
            zone=zone.zone,
            title=zone.title,
            power_low=zone.power_low,
            power_high=zone.power_high,
        )


def _curve(extrema: List[ChannelExtremum]) -> List[IntervalBest]:
    return [IntervalBest.from_extremum(ex) for ex in extrema]


class ActivityOutput(BaseModel):
    """Summary JSON for one processed activity."""
    model_config = ConfigDict(populate_by_name=True)

    heart_analysis: List[IntervalBest] = Field(alias="HeartAnalysis")
    elevation_gain: float = Field(alias="ElevationGain")
    stopped_time: int = Field(alias="StoppedTime")
    elapsed_time: int = Field(alias="ElapsedTime")
    normalized_power: float = Field(alias="NormalizedPower")
    power_analysis: List[IntervalBest] = Field(alias="PowerAnalysis")
    simplified_coordinates: List[List[float]] = Field(alias="SimplifiedCoordinates")
    simplified_distances: List[float] = Field(alias="SimplifiedDistances")
    simplified_elevations: List[float] = Field(alias="SimplifiedElevations")
    cadence_analysis: List[IntervalBest] = Field(alias="CadenceAnalysis")
    temperature_analysis: List[IntervalBest] = Field(alias="TemperatureAnalysis")
    average_power: float = Field(alias="AveragePower")
    total_distance: float = Field(alias="TotalDistance")
    power_zone_buckets: Optional[List[int]] = Field(default=None, alias="PowerZoneBuckets")
    power_zones: Optional[List[PowerZoneOut]] = Field(default=None, alias="PowerZones")
    power_zone_sample_counts: Optional[List[int]] = Field(default=None, alias="PowerZoneSampleCounts")
    s3_key: Optional[str] = Field(default=None, alias="S3Key")

    @classmethod
    def from_processed(cls, processed) -> "ActivityOutput":
        """Build from a pipeline.ProcessedActivity (duck-typed to avoid an import cycle)."""
        zones = None
        if processed.power_zones is not None:
            zones = [PowerZoneOut.from_zone(z) for z in processed.power_zones]
        return cls(
            heart_analysis=_curve(processed.heart_results),
            elevation_gain=processed.elevation_gain_m,
            stopped_time=processed.stopped_seconds,
            elapsed_time=processed.elapsed_seconds,
            normalized_power=processed.normalized_power,
            power_analysis=_curve(processed.power_results),
            simplified_coordinates=processed.simplified_coordinates,
            simplified_distances=processed.simplified_distances,
            simplified_elevations=processed.simplified_elevations,
            cadence_analysis=_curve(processed.cadence_results),
            temperature_analysis=_curve(processed.temperature_results),
            average_power=processed.average_power,
            total_distance=processed.total_distance_km,
            power_zone_buckets=processed.zone_buckets,
            power_zones=zones,
            power_zone_sample_counts=processed.zone_sample_counts,
            s3_key=processed.s3_key,
        )

    def to_payload(self) -> Dict[str, Any]:
        """Alias-keyed dict; zone and upload keys only appear when set."""
        optional = ("power_zone_buckets", "power_zones", "power_zone_sample_counts", "s3_key")
        exclude = {name for name in optional if getattr(self, name) is None}
        return self.model_dump(by_alias=True, exclude=exclude)
