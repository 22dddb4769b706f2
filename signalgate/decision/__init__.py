from signalgate.decision.decide import DecisionConfig, Direction, TradeDecision, Urgency, decide

__all__ = ["DecisionConfig", "Direction", "TradeDecision", "Urgency", "decide"]
