import logging
import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from configobj.validate import Validator

logger = logging.getLogger(__name__)

# configuration files are named <name>[.<flavor>].cfg
config_extension = '.cfg'

# The name of the configuration shipped with this package
CONFIG_NAME = 'condenser'


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('condenser')
    'condenser'
    >>> config_flavor('condenser', 'default')
    'condenser.default'
    """
    configname = name if not flavor else name + '.' + flavor
    return configname


def config_filename(name, directory=None):
    """
    Determines the location of a config file. Without a directory, the file is looked up
    beside this module.
    """
    if directory is None:
        directory = os.path.dirname(os.path.abspath(__file__))
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True):
    """
    Reads one file. A missing optional file yields an empty ConfigObj.
    :param must_exist:  when True, a missing file raises IOError.
    """
    if must_exist or os.path.exists(file):
        return ConfigObj(file, file_error=True)
    return ConfigObj()


def config_flavor_file(name, directory=None, flavor=None, must_exist=True) -> ConfigObj:
    """
    Reads the flavor of a configuration, such as condenser.default.cfg, or the base file
    condenser.cfg when no flavor is given.
    """
    file = config_filename(config_flavor(name, flavor), directory)
    return load_config_file_base(file, must_exist)


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name('Darwin')
    'osx'
    """
    name = name.lower()
    return 'osx' if name == 'darwin' else name


def user_config_file(name):
    return os.path.expanduser('~/.' + name + config_extension)


def load_config(name=CONFIG_NAME, directory=None):
    """
        Merges the layers of a configuration, later files overriding earlier ones:
        - <name>.default.cfg (required)
        - <name>.<platform>.cfg, e.g. condenser.osx.cfg
        - ~/.<name>.cfg
        - <name>.cfg
        The result is validated against <name>.schema.cfg, which supplies missing defaults and
        converts the values to their declared types.
    :param name: the configuration name, without flavor or extension
    :param directory: the directory holding the configuration files.
    :return: the validated ConfigObj
    """
    config = ConfigObj(configspec=config_filename(config_flavor(name, 'schema'), directory))
    config.merge(config_flavor_file(name, directory, 'default'))
    config.merge(config_flavor_file(name, directory, map_os_name(platform.system()), must_exist=False))
    config.merge(load_config_file_base(user_config_file(name), must_exist=False))
    config.merge(config_flavor_file(name, directory, must_exist=False))

    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        for section_list, key, res in flatten_errors(config, result):
            if key is not None:
                logger.error('The "%s" key in the section "%s" failed validation: %s',
                             key, ', '.join(section_list), res)
            else:
                logger.error('The following section was missing: %s', ', '.join(section_list))
        raise ConfigObjError("the config file %s failed validation" % name)
    return config


def fetch_conf_path(conf: Section, path):
    """
    Descends through the named sections.
    :return: the section at the end of the path, or None when a section is missing
    """
    for p in path:
        conf = conf.get(p, None)
        if conf is None:
            return None
    return conf


def apply_conf_path(conf: Section, name_parts, target):
    """
    Applies the section found at name_parts to the target, if there is one.
    """
    conf = fetch_conf_path(conf, name_parts)
    if conf:
        apply_conf(conf, target)


def apply_conf(conf: Section, target):
    """
    Applies the values contained in a configuration section to a target object.
    Only attributes the target already has are set.
    """
    for k, v in conf.items():
        if hasattr(target, k):
            setattr(target, k, v)


def apply(target, config_path, config_name=CONFIG_NAME, directory=None):
    """
    Loads the named configuration and copies the values of one of its sections onto the target.
    :param config_path: dotted section path, such as "transport"
    :param directory: the directory that contains the configuration files
    """
    conf = load_config(config_name, directory)
    apply_conf_path(conf, config_path.split('.'), target)
    return target
