import dataclasses
import ikernel
import pytest

from ikernel import config


def connection_info():

    info = dict()
    info['ip'] = '127.0.0.1'
    info['transport'] = 'tcp'
    info['shell_port'] = 53794
    info['iopub_port'] = 53795
    info['stdin_port'] = 53796
    info['control_port'] = 53797
    info['hb_port'] = 53798
    info['signature_scheme'] = 'hmac-sha256'
    info['key'] = 'a0436f6c-1916-498b-8eb9-e81ab9368e84'

    return info


def test_from_dict():

    profile = config.Profile.from_dict(connection_info())

    assert profile.ip == '127.0.0.1'
    assert profile.shell_port == 53794
    assert profile.hb_port == 53798
    assert profile.key == b'a0436f6c-1916-498b-8eb9-e81ab9368e84'
    assert profile.address(profile.shell_port) == 'tcp://127.0.0.1:53794'


def test_key_not_in_repr():

    profile = config.Profile.from_dict(connection_info())
    assert 'a0436f6c' not in repr(profile)


def test_round_trip():

    info = connection_info()
    profile = config.Profile.from_dict(info)
    assert profile.to_dict() == info


def test_rejected():

    info = connection_info()
    info['transport'] = 'ipc'
    with pytest.raises(config.ConfigurationError):
        config.Profile.from_dict(info)

    info = connection_info()
    info['signature_scheme'] = 'hmac-md5'
    with pytest.raises(config.ConfigurationError):
        config.Profile.from_dict(info)

    info = connection_info()
    del info['iopub_port']
    with pytest.raises(config.ConfigurationError):
        config.Profile.from_dict(info)

    info = connection_info()
    info['shell_port'] = 'shell'
    with pytest.raises(config.ConfigurationError):
        config.Profile.from_dict(info)

    with pytest.raises(config.ConfigurationError):
        config.Profile.from_json(b'[1, 2, 3]')

    with pytest.raises(config.ConfigurationError):
        config.Profile.from_json(b'{"ip": ')

    # ConfigurationError is a ValueError.

    with pytest.raises(ValueError):
        config.Profile.from_dict(dict())


def test_empty_key():

    info = connection_info()
    info['key'] = ''
    profile = config.Profile.from_dict(info)
    assert profile.key == b''

    del info['key']
    profile = config.Profile.from_dict(info)
    assert profile.key == b''


def test_key_type():

    for key in (5, ['abc'], {'key': 'abc'}, 1.5):
        info = connection_info()
        info['key'] = key
        with pytest.raises(config.ConfigurationError):
            config.Profile.from_dict(info)

    profile = config.Profile.from_dict(connection_info())
    with pytest.raises(config.ConfigurationError):
        dataclasses.replace(profile, key=5)

    profile = dataclasses.replace(profile, key=b'secret')
    assert profile.key == b'secret'


def test_load(tmp_path):

    filename = tmp_path / 'kernel-1234.json'
    filename.write_bytes(ikernel.json.dumps(connection_info()))

    profile = config.load(str(filename))
    assert profile.control_port == 53797


def test_kernel_spec():

    argv = ['python', '-m', 'mykernel', '-f', config.connection_placeholder]
    spec = config.KernelSpec('My Kernel', 'mylang', argv)

    expected = dict()
    expected['argv'] = argv
    expected['display_name'] = 'My Kernel'
    expected['language'] = 'mylang'

    assert spec.to_dict() == expected
    assert ikernel.json.loads(spec.to_json()) == expected

    command = spec.command('/tmp/kernel-1234.json')
    assert command[-1] == '/tmp/kernel-1234.json'
    assert spec.command() == argv
    assert spec.argv[-1] == '{connection_file}'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
