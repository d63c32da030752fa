"""
Activity pipeline.

Takes a DecodedActivity and runs every analysis stage to produce a
ProcessedActivity — the single object consumed by the CLI, the API and
the output models.

Flow:
  1. Aggregate raw records → cleaned + coordinate-aligned channels
  2. Normalized power and best-average curves from the cleaned channels
  3. Simplify the GPS track, keeping the retained indices
  4. Merge the aligned channels onto the retained indices (+ grade)
  5. Power zones / time-in-zone when a threshold power is given
  6. Optional upload of the simplified series; a failed upload is logged
     and recorded but never discards the analytics
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from ridetrace.analysis.aggregator import aggregate_records, recording_manufacturer
from ridetrace.analysis.best_average import ChannelExtremum, best_averages, generate_intervals
from ridetrace.analysis.merge import MergedPoint, build_merged_series
from ridetrace.analysis.power import NP_WINDOW_SECONDS, normalized_power
from ridetrace.analysis.simplify import DEFAULT_TOLERANCE, simplify_with_indices
from ridetrace.analysis.zones import (
    PowerZone,
    calc_power_zones,
    zone_sample_counts,
    zone_time_buckets,
)
from ridetrace.fit.records import DecodedActivity
from ridetrace.models.output import MergedDataItem, TimeseriesPayload
from ridetrace.storage.s3_sink import KeyGenerator, SinkFailure, make_key_generator

logger = logging.getLogger(__name__)


@dataclass
class ProcessedActivity:
    """Every derived metric for one activity."""
    simplified_coordinates: List[List[float]]
    simplified_distances: List[float]
    simplified_elevations: List[float]
    retained_indices: List[int]
    merged: List[MergedPoint]

    power_results: List[ChannelExtremum]
    cadence_results: List[ChannelExtremum]
    temperature_results: List[ChannelExtremum]
    heart_results: List[ChannelExtremum]

    elevation_gain_m: float
    stopped_seconds: int
    elapsed_seconds: int
    normalized_power: float
    average_power: float
    total_distance_km: float
    sample_count: int

    # Only when a threshold power was supplied
    power_zones: Optional[List[PowerZone]] = None
    zone_buckets: Optional[List[int]] = None
    zone_sample_counts: Optional[List[int]] = None

    # Upload outcome (both None when no sink was used)
    s3_key: Optional[str] = None
    upload_error: Optional[str] = None

    def timeseries_payload(self) -> TimeseriesPayload:
        return TimeseriesPayload(
            coordinates=self.simplified_coordinates,
            elevation=[MergedDataItem.from_point(p) for p in self.merged],
        )


def process_activity(
    activity: DecodedActivity,
    ftp: Optional[int] = None,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    np_window: int = NP_WINDOW_SECONDS,
) -> ProcessedActivity:
    """
    Run every analysis stage over one decoded activity.

    Args:
        activity: Records and device infos from the decoder.
        ftp: Threshold power in watts. None or <= 0 disables zones.
        tolerance: Track simplification tolerance in degrees.
        np_window: Moving-average window for normalized power.

    Raises:
        EmptyActivity: if the activity has no records.
        NoValidSamples: if no record carries a usable reading.
    """
    manufacturer = recording_manufacturer(activity.devices)
    agg = aggregate_records(activity.records, manufacturer)
    cleaned = agg.cleaned

    intervals = generate_intervals(len(activity.records))
    power_results = best_averages(intervals, cleaned.power)
    cadence_results = best_averages(intervals, cleaned.cadence)
    temperature_results = best_averages(intervals, cleaned.temperature)
    heart_results = best_averages(intervals, cleaned.heart_rate)
    np_value = normalized_power(cleaned.power, np_window)

    simplified, indices = simplify_with_indices(agg.aligned.coordinates(), tolerance)
    merged = build_merged_series(indices, agg.aligned)
    logger.info(
        "Simplified track from %d to %d points (%d intervals evaluated)",
        len(agg.aligned), len(indices), len(intervals),
    )

    processed = ProcessedActivity(
        simplified_coordinates=simplified,
        simplified_distances=[p.distance for p in merged],
        simplified_elevations=[p.elevation for p in merged],
        retained_indices=indices,
        merged=merged,
        power_results=power_results,
        cadence_results=cadence_results,
        temperature_results=temperature_results,
        heart_results=heart_results,
        elevation_gain_m=agg.elevation_gain_m,
        stopped_seconds=agg.stopped_seconds,
        elapsed_seconds=agg.elapsed_seconds,
        normalized_power=np_value,
        average_power=agg.average_power,
        total_distance_km=agg.total_distance_km,
        sample_count=agg.sample_count,
    )

    if ftp is not None and ftp > 0:
        zones = calc_power_zones(ftp)
        processed.power_zones = zones
        processed.zone_buckets = zone_time_buckets(zones, merged, agg.elapsed_seconds)
        processed.zone_sample_counts = zone_sample_counts(zones, cleaned.power)

    return processed


def upload_timeseries(
    processed: ProcessedActivity,
    sink,
    identity_id: str,
    key_generator: Optional[KeyGenerator] = None,
) -> ProcessedActivity:
    """
    Upload the simplified series through `sink` (an S3TimeseriesSink or any
    object with the same `upload` method).

    SinkFailure is logged and stored on `processed.upload_error`; it never
    propagates.
    """
    key_generator = key_generator or make_key_generator()
    key = key_generator()
    try:
        sink.upload(processed.timeseries_payload(), identity_id, key)
    except SinkFailure as exc:
        logger.warning("Timeseries upload failed: %s", exc)
        processed.upload_error = str(exc)
        return processed

    processed.s3_key = key
    return processed
