from imbstream.core.oversampling.synthesizer import InstanceSynthesizer

__all__ = ['InstanceSynthesizer']
