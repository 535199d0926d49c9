"""Tests for bamwindow.core.sample module."""

from pathlib import Path

import pytest

from bamwindow.config import ProtocolStrandedness, SampleConfig, VariantKind
from bamwindow.core.buffer import RecordBuffer
from bamwindow.core.properties import AlignmentProperties, InsertSize
from bamwindow.core.sample import Sample, compute_window_sizes
from bamwindow.errors import StoreIOError
from bamwindow.evidence import SNV

PROPS = AlignmentProperties(insert_size=InsertSize(mean=300.0, sd=50.0), max_read_len=150)


class RecordingVariant:
    """Observable that records what it was given."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result if result is not None else []

    def extract_observations(self, buffer, alignment_properties, max_depth):
        self.calls.append((buffer, alignment_properties, max_depth))
        return self.result


class TestWindowSizes:
    """Tests for window derivation from alignment statistics."""

    @pytest.mark.unit
    def test_default_margin(self):
        windows = compute_window_sizes(PROPS, sd_margin=6.0)
        assert windows.read_pair_window == 600
        assert windows.single_read_window == 150

    @pytest.mark.unit
    def test_custom_margin(self):
        windows = compute_window_sizes(PROPS, sd_margin=2.0)
        assert windows.read_pair_window == 400

    @pytest.mark.unit
    def test_rounding(self):
        props = AlignmentProperties(insert_size=InsertSize(mean=300.4, sd=7.25), max_read_len=101)
        # 300.4 + 43.5 = 343.9
        assert compute_window_sizes(props, sd_margin=6.0).read_pair_window == 344

    @pytest.mark.unit
    def test_half_rounds_up(self):
        props = AlignmentProperties(insert_size=InsertSize(mean=300.5, sd=50.0), max_read_len=101)
        # 300.5 + 300 = 600.5
        assert compute_window_sizes(props, sd_margin=6.0).read_pair_window == 601

    @pytest.mark.unit
    def test_without_insert_size(self):
        props = AlignmentProperties(insert_size=None, max_read_len=100)
        windows = compute_window_sizes(props, sd_margin=6.0)
        assert windows.read_pair_window == windows.single_read_window == 100


class TestSample:
    """Tests for the Sample orchestrator."""

    @pytest.mark.unit
    def test_builds_record_buffer(self, fake_store):
        store = fake_store()
        sample = Sample(store, PROPS)

        assert isinstance(sample.record_buffer, RecordBuffer)
        assert sample.record_buffer.store is store
        assert sample.record_buffer.window(read_pair_mode=True) == 600
        assert sample.record_buffer.window(read_pair_mode=False) == 150
        assert sample.record_buffer.config is sample.config

    @pytest.mark.unit
    def test_config_defaults(self, fake_store):
        sample = Sample(fake_store(), PROPS)

        assert sample.max_depth == 200
        assert sample.use_fragment_evidence is True
        assert sample.protocol_strandedness is ProtocolStrandedness.OPPOSITE
        assert not sample.omits_repeat_regions(VariantKind.SNV)

    @pytest.mark.unit
    def test_margin_from_config(self, fake_store):
        sample = Sample(fake_store(), PROPS, SampleConfig(insert_size_sd_margin=3.0))
        assert sample.record_buffer.read_pair_window == 450

    @pytest.mark.unit
    def test_omits_repeat_regions(self, fake_store):
        config = SampleConfig(omit_repeat_regions={VariantKind.DELETION})
        sample = Sample(fake_store(), PROPS, config)

        assert sample.omits_repeat_regions(VariantKind.DELETION)
        assert sample.omits_repeat_regions("deletion")
        assert not sample.omits_repeat_regions(VariantKind.INSERTION)

    @pytest.mark.unit
    def test_extract_observations_delegates(self, fake_store):
        sample = Sample(fake_store(), PROPS, SampleConfig(max_depth=17))
        variant = RecordingVariant(result=["obs"])

        pileup = sample.extract_observations(variant)

        assert pileup == ["obs"]
        assert variant.calls == [(sample.record_buffer, PROPS, 17)]

    @pytest.mark.unit
    def test_extract_observations_propagates_store_errors(self, fake_store):
        sample = Sample(fake_store({"chr1": []}), PROPS)

        with pytest.raises(StoreIOError):
            sample.extract_observations(SNV("chrUn", 10, "A", "C"))

    @pytest.mark.unit
    def test_context_manager_closes_store(self, fake_store):
        store = fake_store()
        with Sample(store, PROPS) as sample:
            assert isinstance(sample, Sample)
        assert store.closed

    @pytest.mark.unit
    def test_close_without_close_method(self):
        class Minimal:
            def fetch(self, contig, start, stop):
                return []

        Sample(Minimal(), PROPS).close()


class TestSampleFromPath:
    """Tests for opening samples from BAM files."""

    @pytest.mark.integration
    def test_estimates_properties(self, paired_bam_path):
        with Sample.from_path(paired_bam_path) as sample:
            assert sample.alignment_properties.max_read_len == 200
            assert sample.record_buffer.single_read_window == 200
            assert sample.record_buffer.read_pair_window == 344

    @pytest.mark.integration
    def test_given_properties_are_used(self, paired_bam_path):
        with Sample.from_path(paired_bam_path, alignment_properties=PROPS) as sample:
            assert sample.alignment_properties is PROPS
            assert sample.record_buffer.read_pair_window == 600

    @pytest.mark.integration
    def test_single_end_without_fragment_evidence(self, single_end_bam_path):
        config = SampleConfig(use_fragment_evidence=False)
        with Sample.from_path(single_end_bam_path, config=config) as sample:
            assert sample.alignment_properties.insert_size is None
            assert sample.record_buffer.read_pair_window == 75

    @pytest.mark.integration
    def test_missing_index(self, tmp_path, paired_bam_path):
        unindexed = tmp_path / "unindexed.bam"
        unindexed.write_bytes(Path(paired_bam_path).read_bytes())

        with pytest.raises(StoreIOError):
            Sample.from_path(str(unindexed), alignment_properties=PROPS)

    @pytest.mark.integration
    def test_unknown_contig(self, paired_bam_path):
        with Sample.from_path(paired_bam_path, alignment_properties=PROPS) as sample:
            with pytest.raises(StoreIOError, match="chrZ"):
                sample.extract_observations(SNV("chrZ", 100, "A", "G"))
