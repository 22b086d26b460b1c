import voidinstall

if __name__ == '__main__':
	voidinstall.run_as_a_module()
