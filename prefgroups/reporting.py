"""
Write a grouping result to disk and to the console: TXT/TSV listings, an
unmet-preferences report, a preference network map and a plot of trial
scores.
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Optional

import matplotlib.pyplot as plt
import networkx as nx
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.patches import Circle

from .logging_config import get_logger
from .optimizer import GroupingResult
from .preferences import PreferenceTable

logger = get_logger(__name__)

PersonId = Hashable


def group_names(groups: List[List[PersonId]], table: PreferenceTable) -> List[List[str]]:
    return [[table.name(pid) for pid in g] for g in groups]


def format_summary(result: GroupingResult, table: PreferenceTable) -> str:
    """Console report: groups by name, satisfied count, and who is left without a partner."""
    lines = [f"Group {gi} ({len(g)}): {', '.join(names)}"
             for gi, (g, names) in enumerate(zip(result.groups, group_names(result.groups, table)))]
    lines.append(f"num people who have someone they want to work with: {result.satisfied_count}")
    unsatisfied = [table.name(pid) for pid in result.unsatisfied_ids]
    lines.append(f"people without someone they want: {', '.join(unsatisfied) if unsatisfied else '(none)'}")
    return "\n".join(lines)


def save_groups_txt(result: GroupingResult, table: PreferenceTable, out_stem: str):
    """Save a human-readable TXT listing of each group and its members (names only)."""
    lines = [f"Group {gi} ({len(g)}): " + ", ".join(names)
             for gi, (g, names) in enumerate(zip(result.groups, group_names(result.groups, table)))]
    with open(f"{out_stem}__groups.txt", "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


def save_groups_tsv(result: GroupingResult, table: PreferenceTable, out_stem: str):
    """Save a TSV mapping group index to person id, name and whether they got a partner."""
    unsatisfied = set(result.unsatisfied_ids)
    rows = [{"group_index": gi, "person_id": pid, "name": table.name(pid), "satisfied": pid not in unsatisfied}
            for gi, g in enumerate(result.groups) for pid in g]
    pd.DataFrame(rows, columns=["group_index", "person_id", "name", "satisfied"]) \
      .to_csv(f"{out_stem}__assigned_groups.tsv", sep="\t", index=False)


def save_unmet_preferences(result: GroupingResult, table: PreferenceTable, out_stem: str):
    """Save a TSV listing people whose group holds nobody they asked for."""
    group_of: Dict[PersonId, List[PersonId]] = {pid: g for g in result.groups for pid in g}
    rows = []
    for pid in result.unsatisfied_ids:
        members = group_of.get(pid, [])
        rows.append({
            "person": table.name(pid),
            "assigned_group_members": "; ".join(sorted(table.name(m) for m in members if m != pid)),
            "input_preferences": "; ".join(table.name(q) for q in table.yes_list(pid)),
        })
    pd.DataFrame(rows, columns=["person", "assigned_group_members", "input_preferences"]) \
      .to_csv(f"{out_stem}__unmet_preferences.tsv", sep="\t", index=False)


def save_mutual_groups(groups: List[List[PersonId]], table: PreferenceTable, out_stem: str):
    """Save maximal mutual groups, largest first, one per line."""
    lines = [f"{len(g)}: " + ", ".join(table.name(pid) for pid in g) for g in groups]
    with open(f"{out_stem}__mutual_groups.txt", "w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")


def save_trial_scores(result: GroupingResult, out_stem: str):
    """Save the satisfied count of every successful trial as TSV and histogram."""
    df = pd.DataFrame({"satisfied": result.scores})
    counts = df["satisfied"].value_counts().sort_index()
    counts.rename_axis("satisfied").reset_index(name="trials") \
          .to_csv(f"{out_stem}__trial_scores.tsv", sep="\t", index=False)

    plt.figure()
    if not df.empty:
        sns.histplot(data=df, x="satisfied", discrete=True)
        plt.axvline(result.satisfied_count, color="black", linestyle="--", linewidth=1.0)
    plt.title(f"Satisfied People per Successful Trial ({result.successes}/{result.trials_run})")
    plt.xlabel("Satisfied people"); plt.ylabel("Trials")
    plt.tight_layout()
    plt.savefig(f"{out_stem}__trial_scores.png", dpi=200)
    plt.close()


def preference_network(result: GroupingResult, table: PreferenceTable) -> nx.DiGraph:
    """Digraph of "yes" answers keyed by person id; nodes carry group index and display name."""
    G = nx.DiGraph()
    for gi, g in enumerate(result.groups):
        for pid in g:
            G.add_node(pid, group=gi, label=table.name(pid))
    for pid in table:
        for q in table.yes_list(pid):
            G.add_edge(pid, q)
    return G


def save_network_map(result: GroupingResult, table: PreferenceTable, out_stem: str, seed: Optional[int] = None):
    """Draw the "yes" network clustered by assigned group (nodes colored by group) and save as PNG."""
    G = preference_network(result, table)

    plt.figure(figsize=(11, 9))
    if G.number_of_nodes() == 0:
        plt.title("Preference Network (no nodes)")
        plt.axis("off")
        plt.tight_layout()
        plt.savefig(f"{out_stem}__network_map.png", dpi=200)
        plt.close()
        return

    num_groups = len(result.groups)
    angle_step = 2 * np.pi / max(num_groups, 1)
    cluster_radius = 3.0 + 0.6 * num_groups
    local_radius = 1.2
    centers = {gi: np.array([cluster_radius * np.cos(gi * angle_step),
                             cluster_radius * np.sin(gi * angle_step)])
               for gi in range(num_groups)}

    pos = {}
    for gi, g in enumerate(result.groups):
        local = nx.spring_layout(G.subgraph(g), seed=seed, k=0.8 / max(np.sqrt(len(g)), 1.0), iterations=300)
        pts = np.array(list(local.values()))
        pts = pts - pts.mean(axis=0)
        denom = np.max(np.linalg.norm(pts, axis=1)) or 1.0
        pts = (pts / denom) * local_radius
        for pid, p in zip(local, pts):
            pos[pid] = centers[gi] + p
        plt.gca().add_patch(Circle(centers[gi], local_radius * 1.4, facecolor="none",
                                   edgecolor="lightgray", linewidth=1.0, zorder=0))

    node_colors = [G.nodes[pid].get("group", -1) for pid in G.nodes()]
    nx.draw_networkx_edges(G, pos, arrows=True, arrowsize=10, width=0.9, alpha=0.5, edge_color="gray")
    nx.draw_networkx_nodes(G, pos, node_size=420, node_color=node_colors, cmap=plt.cm.tab20,
                           linewidths=1.0, edgecolors="black")
    nx.draw_networkx_labels(G, pos, labels=nx.get_node_attributes(G, "label"), font_size=8)
    plt.axis("off")
    plt.title("Preference Network (group-clustered)")
    plt.tight_layout()
    plt.savefig(f"{out_stem}__network_map.png", dpi=200)
    plt.close()


def write_reports(result: GroupingResult, table: PreferenceTable, out_stem: str,
                  plots: bool = True, seed: Optional[int] = None):
    """Write every report for result under out_stem."""
    save_groups_txt(result, table, out_stem)
    save_groups_tsv(result, table, out_stem)
    save_unmet_preferences(result, table, out_stem)
    if plots:
        save_trial_scores(result, out_stem)
        save_network_map(result, table, out_stem, seed=seed)
    logger.info(f"Reports written with stem {out_stem}")
