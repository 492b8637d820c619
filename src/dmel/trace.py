"""
Markov traces and trace summaries.

A MarkovTrace is produced by the simulation engine (an external
collaborator); this module only reads it. `MarkovTrace.value` is the native
counterpart of the `trace[cycle, column]` references the translator emits.

`summarize_traces` combines several traces (e.g. Monte Carlo runs) into
per-cycle means with 95% bounds, and writes them as a CSV table.
"""

import csv
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, TextIO, Tuple, Union


@dataclass
class MarkovTrace:
    """
    State prevalence and reward series of one Markov simulation.

    Properties:
        name: Markov chain name
        state_names: Health states, in column order
        prev: Prevalence per state per cycle ([state][cycle])
        dim_names: Reward dimensions (e.g. "Cost", "QALY")
        cycle_rewards / cum_rewards: Per-cycle and cumulative rewards
            ([dim][cycle])
        cycle_rewards_dis / cum_rewards_dis: Discounted counterparts;
            empty when the model does not discount
    """

    name: str
    state_names: List[str]
    prev: List[List[float]]
    dim_names: List[str] = field(default_factory=list)
    cycle_rewards: List[List[float]] = field(default_factory=list)
    cum_rewards: List[List[float]] = field(default_factory=list)
    cycle_rewards_dis: List[List[float]] = field(default_factory=list)
    cum_rewards_dis: List[List[float]] = field(default_factory=list)

    @property
    def discounted(self) -> bool:
        return bool(self.cycle_rewards_dis)

    @property
    def num_cycles(self) -> int:
        return len(self.prev[0]) if self.prev else 0

    def column_index(self, column: Union[str, int]) -> int:
        if isinstance(column, str):
            try:
                return self.state_names.index(column)
            except ValueError:
                raise KeyError(f"Trace '{self.name}' has no state '{column}'")
        if column < 0 or column >= len(self.state_names):
            raise IndexError(f"Trace '{self.name}' has no state column {column}")
        return column

    def value(self, cycle: int, column: Union[str, int]) -> float:
        """Prevalence of a state (by name or index) at a cycle."""
        return self.prev[self.column_index(column)][cycle]


@dataclass
class SeriesSummary:
    """Mean and 95% bounds of one series, per cycle."""
    mean: List[float] = field(default_factory=list)
    lb: List[float] = field(default_factory=list)
    ub: List[float] = field(default_factory=list)


def bound_indices(n: int) -> Tuple[int, int]:
    """Indices of the 2.5th and 97.5th order statistics of n sorted values."""
    lb = int(math.floor(0.025 * n + 0.5)) - 1
    ub = int(math.floor(0.975 * n + 0.5)) - 1
    lb = min(max(0, lb), n - 1)
    ub = min(max(0, ub), n - 1)
    if lb >= ub:
        lb, ub = 0, n - 1
    return lb, ub


def _summarize(series: Sequence[Sequence[float]], max_cycles: int) -> SeriesSummary:
    summary = SeriesSummary()
    for c in range(max_cycles):
        values = sorted(s[c] for s in series if len(s) > c)
        lb, ub = bound_indices(len(values))
        summary.mean.append(sum(values) / len(values))
        summary.lb.append(values[lb])
        summary.ub.append(values[ub])
    return summary


def _final(series: Sequence[Sequence[float]]) -> Tuple[float, float, float]:
    values = sorted(s[-1] for s in series)
    lb, ub = bound_indices(len(values))
    return sum(values) / len(values), values[lb], values[ub]


@dataclass
class TraceSummary:
    """Per-cycle summary of one or more traces of the same chain."""

    name: str
    state_names: List[str]
    dim_names: List[str]
    discounted: bool
    num_sims: List[int]
    prev: List[SeriesSummary]
    cycle_rewards: List[SeriesSummary]
    cum_rewards: List[SeriesSummary]
    cycle_rewards_dis: List[SeriesSummary] = field(default_factory=list)
    cum_rewards_dis: List[SeriesSummary] = field(default_factory=list)
    expected_values: List[Tuple[float, float, float]] = field(default_factory=list)
    expected_values_dis: List[Tuple[float, float, float]] = field(default_factory=list)

    @property
    def num_cycles(self) -> int:
        return len(self.num_sims)

    def headers(self) -> List[str]:
        cols = ["Cycle"]
        for state in self.state_names:
            cols += [f"{state}_Mean", f"{state}_LB", f"{state}_UB"]
        groups = ["Cycle", "Cum"]
        if self.discounted:
            groups += ["Cycle_Dis", "Cum_Dis"]
        for group in groups:
            for dim in self.dim_names:
                cols += [f"{group}_Mean_{dim}", f"{group}_LB_{dim}", f"{group}_UB_{dim}"]
        cols.append("Num_Sims")
        return cols

    def rows(self, digits: Optional[int] = None) -> List[list]:
        """Table rows matching headers(); reward values rounded to `digits`."""
        def fmt(v):
            return round(v, digits) if digits is not None else v

        reward_groups = [self.cycle_rewards, self.cum_rewards]
        if self.discounted:
            reward_groups += [self.cycle_rewards_dis, self.cum_rewards_dis]

        rows = []
        for t in range(self.num_cycles):
            row = [t]
            for s in self.prev:
                row += [s.mean[t], s.lb[t], s.ub[t]]
            for group in reward_groups:
                for s in group:
                    row += [fmt(s.mean[t]), fmt(s.lb[t]), fmt(s.ub[t])]
            row.append(self.num_sims[t])
            rows.append(row)
        return rows

    def to_csv(self, stream: TextIO, digits: Optional[int] = None) -> None:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(self.headers())
        writer.writerows(self.rows(digits))


def summarize_traces(traces: Sequence[MarkovTrace]) -> TraceSummary:
    """
    Summarize traces of the same Markov chain.

    Traces may run for different numbers of cycles; each cycle is
    summarized over the traces that reached it.

    Raises:
        ValueError: no traces, or traces with different state lists
    """
    if not traces:
        raise ValueError("No traces to summarize")
    first = traces[0]
    for tr in traces[1:]:
        if tr.state_names != first.state_names or tr.dim_names != first.dim_names:
            raise ValueError(f"Trace '{tr.name}' does not match the states of '{first.name}'")

    max_cycles = max(tr.num_cycles for tr in traces)
    num_dim = len(first.dim_names)

    summary = TraceSummary(
        name=first.name,
        state_names=list(first.state_names),
        dim_names=list(first.dim_names),
        discounted=first.discounted,
        num_sims=[sum(1 for tr in traces if tr.num_cycles > c) for c in range(max_cycles)],
        prev=[_summarize([tr.prev[s] for tr in traces], max_cycles)
              for s in range(len(first.state_names))],
        cycle_rewards=[_summarize([tr.cycle_rewards[d] for tr in traces], max_cycles)
                       for d in range(num_dim)],
        cum_rewards=[_summarize([tr.cum_rewards[d] for tr in traces], max_cycles)
                     for d in range(num_dim)],
        expected_values=[_final([tr.cum_rewards[d] for tr in traces]) for d in range(num_dim)],
    )
    if first.discounted:
        summary.cycle_rewards_dis = [
            _summarize([tr.cycle_rewards_dis[d] for tr in traces], max_cycles) for d in range(num_dim)
        ]
        summary.cum_rewards_dis = [
            _summarize([tr.cum_rewards_dis[d] for tr in traces], max_cycles) for d in range(num_dim)
        ]
        summary.expected_values_dis = [
            _final([tr.cum_rewards_dis[d] for tr in traces]) for d in range(num_dim)
        ]
    return summary


__all__ = ["MarkovTrace", "SeriesSummary", "TraceSummary", "bound_indices", "summarize_traces"]
