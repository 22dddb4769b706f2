from signalgate.engine.core import AnalysisEngine, AnalysisReport

__all__ = ["AnalysisEngine", "AnalysisReport"]
