from typing import Dict, List, Optional, Tuple


def award_group(players, submitter_ids) -> List[str]:
    """Apply scoring for the chosen answer group.

    +1 to each submitter still seated in the room. Submitters who have since
    disconnected are skipped. Returns the names of the players who scored, in
    submission order.
    """
    by_id = {p.id: p for p in players}
    chosen_names = []
    for player_id in submitter_ids:
        player = by_id.get(player_id)
        if not player:
            continue
        player.points += 1
        chosen_names.append(player.name)
    return chosen_names


def top_usage(usage: Dict[str, int]) -> Tuple[Optional[str], int]:
    # Only a strictly greater count replaces the best, so the first-seen
    # text wins ties.
    top_word, top_count = None, 0
    for word, count in usage.items():
        if count > top_count:
            top_word, top_count = word, count
    return top_word, top_count


def final_standings(players, usage_stats) -> dict:
    """Summarize a finished game.

    Winners are every player holding the maximum score, so ties list all of
    them. ``usageStats`` maps each player id to the answer they submitted most
    often over the whole game.
    """
    final_players = list(players)
    max_points = max((p.points for p in final_players), default=0)
    winners = [p for p in final_players if p.points == max_points]

    usage_summary = {}
    for player in final_players:
        word, count = top_usage(usage_stats.get(player.id, {}))
        usage_summary[player.id] = {'topWord': word, 'topCount': count}

    return {
        'winners': [p.to_dict() for p in winners],
        'players': [p.to_dict() for p in final_players],
        'usageStats': usage_summary,
    }
