"""Statistics used by the colocalization analyses."""

from fluoranalysis.core.statistics.distribution import inverse_normal_cdf
from fluoranalysis.core.statistics.kendall_tau import weighted_kendall_tau_b_correlation
from fluoranalysis.core.statistics.min_max import min_max
from fluoranalysis.core.statistics.pearson import pearson_correlation
from fluoranalysis.core.statistics.sample import effective_sample_size
from fluoranalysis.core.statistics.sort import weighted_merge_sort_mut

__all__ = [
    'effective_sample_size',
    'inverse_normal_cdf',
    'min_max',
    'pearson_correlation',
    'weighted_kendall_tau_b_correlation',
    'weighted_merge_sort_mut',
]
