from .resolver import KpiReference, extract_references, substitute
from .service import FormulaService, ResolvedFormula
